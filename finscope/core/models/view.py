"""Immutable snapshot of everything the market section displays."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from finscope.core.exceptions import AggregationFailedError
from finscope.core.models.market import Asset
from finscope.core.models.status import SourceRole, SourceState, SourceStatus


class AggregateView(BaseModel):
    """Merged, displayable market snapshot plus per-source health.

    Instances are never mutated; the aggregator swaps in a new one at each step.
    """

    model_config = ConfigDict(frozen=True)

    assets: tuple[Asset, ...] = ()
    source_statuses: dict[str, SourceStatus] = Field(default_factory=dict)
    selected: Asset | None = None
    query: str = ""
    error: dict[str, Any] | None = None
    refreshing: bool = False

    @property
    def filtered_assets(self) -> tuple[Asset, ...]:
        """Assets whose name or symbol contains the query, case-insensitively."""
        needle = self.query.strip().lower()
        if not needle:
            return self.assets
        return tuple(
            asset
            for asset in self.assets
            if needle in asset.name.lower() or needle in asset.symbol.lower()
        )

    def find(self, asset_id: str) -> Asset | None:
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        return None

    @property
    def primary_status(self) -> SourceStatus | None:
        for status in self.source_statuses.values():
            if status.role == SourceRole.PRIMARY:
                return status
        return None

    @property
    def health(self) -> str:
        """Overall health: healthy, degraded, unhealthy or unknown."""
        primary = self.primary_status
        if self.refreshing or primary is None or not primary.is_resolved:
            return "unknown"
        if primary.state == SourceState.ERROR:
            return "unhealthy"
        if any(status.state == SourceState.ERROR for status in self.source_statuses.values()):
            return "degraded"
        return "healthy"

    def raise_for_error(self) -> None:
        """Raise AggregationFailedError if the last refresh cycle failed."""
        if self.error is not None:
            raise AggregationFailedError(self.error.get("message", "Aggregation failed"), details=dict(self.error))


__all__ = ["AggregateView"]
