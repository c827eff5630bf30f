"""Shared plumbing for view state containers."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..gateway import RemoteGateway

logger = logging.getLogger(__name__)

SUCCESS = "success"
FAILED = "failed"
BLOCKED = "blocked"
CANCELLED = "cancelled"


@dataclass(frozen=True)
class MutationOutcome:
    """What happened to a user-initiated change."""

    status: str
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def success(cls, message: Optional[str] = None) -> "MutationOutcome":
        return cls(SUCCESS, message)

    @classmethod
    def failed(cls, message: str) -> "MutationOutcome":
        return cls(FAILED, message)

    @classmethod
    def blocked(cls, message: str) -> "MutationOutcome":
        return cls(BLOCKED, message)

    @classmethod
    def cancelled(cls) -> "MutationOutcome":
        return cls(CANCELLED)


class View:
    """Base for state containers scoped to one displayed view.

    Use as ``async with SomeView(gateway) as view: ...`` so that timers are
    released on every exit path. Results of requests that finish after the
    view closed, or after a newer request of the same kind, are dropped.
    """

    def __init__(self, gateway: RemoteGateway):
        self._gateway = gateway
        self._closed = False
        self._latest: Dict[str, int] = {}

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        pass

    def close(self) -> None:
        self._closed = True

    async def __aenter__(self):
        try:
            await self.open()
        except BaseException:
            self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _begin(self, kind: str) -> int:
        token = self._latest.get(kind, 0) + 1
        self._latest[kind] = token
        return token

    def _accepts(self, kind: str, token: int) -> bool:
        if self._closed:
            logger.debug("Discarding %s result for closed %s", kind, type(self).__name__)
            return False
        if self._latest.get(kind) != token:
            logger.debug("Discarding superseded %s result", kind)
            return False
        return True
