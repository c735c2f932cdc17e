"""Per-source health status and its lifecycle."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from finscope.core.exceptions import InvalidStatusTransitionError, SourceUnavailableError


class SourceState(str, Enum):
    """Lifecycle states of a price source."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class SourceRole(str, Enum):
    """Whether a source gates the refresh cycle or is advisory."""

    PRIMARY = "primary"
    SUPPLEMENTAL = "supplemental"


_ALLOWED_TRANSITIONS: dict[SourceState, frozenset[SourceState]] = {
    SourceState.IDLE: frozenset({SourceState.LOADING}),
    SourceState.LOADING: frozenset({SourceState.SUCCESS, SourceState.ERROR}),
    SourceState.SUCCESS: frozenset({SourceState.LOADING}),
    SourceState.ERROR: frozenset({SourceState.LOADING}),
}


class SourceStatus(BaseModel):
    """Immutable health record of one source; transitions return new instances."""

    model_config = ConfigDict(frozen=True)

    source: str
    role: SourceRole = SourceRole.SUPPLEMENTAL
    state: SourceState = SourceState.IDLE
    last_updated: datetime | None = None
    error_code: str | None = None
    error_message: str | None = None

    def _transition(self, target: SourceState, **changes: object) -> SourceStatus:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidStatusTransitionError(self.source, self.state.value, target.value)
        return self.model_copy(update={"state": target, **changes})

    def begin(self) -> SourceStatus:
        """Enter ``loading`` at the start of a refresh cycle; clears the prior error."""
        return self._transition(SourceState.LOADING, error_code=None, error_message=None)

    def succeed(self, at: datetime) -> SourceStatus:
        return self._transition(SourceState.SUCCESS, last_updated=at)

    def fail(self, error: SourceUnavailableError, at: datetime | None) -> SourceStatus:
        """Resolve to ``error``; ``at=None`` keeps the previous timestamp (not attempted)."""
        return self._transition(
            SourceState.ERROR,
            last_updated=at if at is not None else self.last_updated,
            error_code=error.error_code.value,
            error_message=error.message,
        )

    @property
    def is_resolved(self) -> bool:
        return self.state in (SourceState.SUCCESS, SourceState.ERROR)


__all__ = ["SourceState", "SourceRole", "SourceStatus"]
