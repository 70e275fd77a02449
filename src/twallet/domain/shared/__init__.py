"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .issuance_client_protocol import IssuanceClientProtocol

__all__ = ["IssuanceClientProtocol"]
