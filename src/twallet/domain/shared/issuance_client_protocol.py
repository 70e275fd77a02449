"""Protocol interface for wallet issuance client implementations.

This protocol defines the card issuance operations callers depend on. It
allows tests and alternative transports to stand in for the HTTP client.
"""

from __future__ import annotations

from typing import (
    Any,
    Callable,
    Optional,
    Protocol,
    Sequence,
    TYPE_CHECKING,
    runtime_checkable,
)

if TYPE_CHECKING:
    # Avoid circular imports by only importing types during type checking
    from ...application.dtos import (
        InstanceFieldValueDTO,
        InstanceRecordDTO,
        TemplateSpecDTO,
    )


@runtime_checkable
class IssuanceClientProtocol(Protocol):
    """Synchronous card issuance operations."""

    def create_template(self, spec: "TemplateSpecDTO") -> dict[str, Any]:
        """Register a card template.

        Args:
            spec: Template definition; its serial number must be unique on the service

        Returns:
            The envelope echoed back by the service
        """
        ...

    def create_instance(
        self,
        template_id: int,
        fields: Sequence["InstanceFieldValueDTO"],
        on_activated: Optional[Callable[[str], None]] = None,
    ) -> "InstanceRecordDTO":
        """Create a card instance from a template.

        Args:
            template_id: Numeric id of the template (not its serial number)
            fields: Field contents for the new card
            on_activated: Called once with the activation id after the holder
                scans the card; starts a background poller when given

        Returns:
            The created instance record, without waiting for activation
        """
        ...

    def fetch_status(self, instance_id: int) -> Optional[str]:
        """Return the instance's activation id, or None if not yet activated."""
        ...
