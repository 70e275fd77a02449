"""Activation polling for issued card instances.

A holder activates a card by scanning its QR code at some arbitrary later
time. The service only exposes that through the instance status, so after an
instance is created we ask for its status every ``interval`` seconds until an
activation id shows up or ``ceiling`` seconds worth of ticks have gone by.

Each session ends in exactly one terminal state. A single failed status fetch
ends the session; there is no retry.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
import threading
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_CEILING = 300.0

FetchStatus = Callable[[], Optional[str]]
AsyncFetchStatus = Callable[[], Awaitable[Optional[str]]]
ActivationCallback = Callable[[str], None]
AsyncActivationCallback = Callable[[str], Union[None, Awaitable[None]]]


class PollerState(str, Enum):
    RUNNING = "running"
    ACTIVATED = "activated"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset(
    {
        PollerState.ACTIVATED,
        PollerState.TIMED_OUT,
        PollerState.FAILED,
        PollerState.CANCELLED,
    }
)


class PollingConfig(BaseModel):
    """Tick spacing and total wait budget of an activation poller, in seconds."""

    interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    ceiling: float = Field(default=DEFAULT_POLL_CEILING, gt=0)

    @property
    def max_attempts(self) -> int:
        """Number of status fetches before the session times out.

        Rounded before taking the ceiling so that e.g. 0.06 / 0.001 gives 60
        and not 61.
        """
        return math.ceil(round(self.ceiling / self.interval, 6))


class ActivationPoller:
    """Polls for activation on a background daemon thread.

    The handle exposes the session's state and lets the owner cancel it.
    Cancellation is observed at the next tick boundary at the latest.
    """

    def __init__(
        self,
        fetch_status: FetchStatus,
        on_activated: ActivationCallback,
        config: Optional[PollingConfig] = None,
        name: str = "activation-poller",
    ) -> None:
        self._fetch_status = fetch_status
        self._on_activated = on_activated
        self._config = config or PollingConfig()
        self._name = name
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.state = PollerState.RUNNING
        self.attempts = 0
        self.activation_id: Optional[str] = None
        self.error: Optional[BaseException] = None

    @property
    def config(self) -> PollingConfig:
        return self._config

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def start(self) -> "ActivationPoller":
        if self._thread is not None:
            raise RuntimeError(f"{self._name} already started")
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        return self

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the session to end. Returns True once it has."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.done

    def _run(self) -> None:
        max_attempts = self._config.max_attempts
        while not self._cancelled.wait(self._config.interval):
            if self.attempts >= max_attempts:
                self.state = PollerState.TIMED_OUT
                logger.warning(
                    "%s timed out after %d attempts", self._name, self.attempts
                )
                return

            self.attempts += 1
            try:
                activation_id = self._fetch_status()
            except Exception as e:
                if self._cancelled.is_set():
                    break
                self.error = e
                self.state = PollerState.FAILED
                logger.error("%s stopped: status fetch failed: %s", self._name, e)
                return

            if self._cancelled.is_set():
                break
            if not activation_id:
                continue

            self.activation_id = activation_id
            self.state = PollerState.ACTIVATED
            logger.info(
                "%s observed activation",
                self._name,
                extra={"vc_cid": activation_id, "attempts": self.attempts},
            )
            try:
                self._on_activated(activation_id)
            except Exception:
                logger.exception("%s activation callback raised", self._name)
            return

        self.state = PollerState.CANCELLED
        logger.info("%s cancelled after %d attempts", self._name, self.attempts)


class AsyncActivationPoller:
    """Asyncio counterpart of ``ActivationPoller``, running as a task.

    ``on_activated`` may be a plain function or a coroutine function.
    """

    def __init__(
        self,
        fetch_status: AsyncFetchStatus,
        on_activated: AsyncActivationCallback,
        config: Optional[PollingConfig] = None,
        name: str = "activation-poller",
    ) -> None:
        self._fetch_status = fetch_status
        self._on_activated = on_activated
        self._config = config or PollingConfig()
        self._name = name
        self._task: Optional[asyncio.Task[None]] = None

        self.state = PollerState.RUNNING
        self.attempts = 0
        self.activation_id: Optional[str] = None
        self.error: Optional[BaseException] = None

    @property
    def config(self) -> PollingConfig:
        return self._config

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def start(self) -> "AsyncActivationPoller":
        if self._task is not None:
            raise RuntimeError(f"{self._name} already started")
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=self._name
        )
        self._task.add_done_callback(self._on_task_done)
        return self

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()

    async def wait(self) -> PollerState:
        """Wait for the session to end and return its terminal state."""
        if self._task is not None:
            await asyncio.wait({self._task})
        return self.state

    def _on_task_done(self, task: "asyncio.Task[None]") -> None:
        # A task cancelled before its first step never enters _run's body.
        if task.cancelled() and self.state is PollerState.RUNNING:
            self.state = PollerState.CANCELLED
            logger.info("%s cancelled after %d attempts", self._name, self.attempts)

    async def _run(self) -> None:
        max_attempts = self._config.max_attempts
        while True:
            await asyncio.sleep(self._config.interval)
            if self.attempts >= max_attempts:
                self.state = PollerState.TIMED_OUT
                logger.warning(
                    "%s timed out after %d attempts", self._name, self.attempts
                )
                return

            self.attempts += 1
            try:
                activation_id = await self._fetch_status()
            except Exception as e:
                self.error = e
                self.state = PollerState.FAILED
                logger.error("%s stopped: status fetch failed: %s", self._name, e)
                return

            if activation_id:
                break

        self.activation_id = activation_id
        self.state = PollerState.ACTIVATED
        logger.info(
            "%s observed activation",
            self._name,
            extra={"vc_cid": activation_id, "attempts": self.attempts},
        )
        try:
            result = self._on_activated(activation_id)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("%s activation callback raised", self._name)
