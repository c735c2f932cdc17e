"""Multi-source market data aggregation.

A refresh cycle runs in two phases. Phase one fetches the primary listing and
must succeed; phase two fans out to every supplemental source concurrently,
each bounded by a timeout and failing independently. Every intermediate state
is published as a fresh ``AggregateView``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from finscope.core.data.providers.base import FetchResult, PrimarySource, QuoteMatcher, SupplementalSource
from finscope.core.exceptions import AggregationFailedError, SourceUnavailableError
from finscope.core.logging import log_context
from finscope.core.models import AggregateView, Asset, SourceState, SourceStatus
from finscope.core.monitoring import MetricsCollector, get_metrics_collector

DEFAULT_SUPPLEMENTAL_TIMEOUT = 10.0


def merge_quotes(assets: Iterable[Asset], matchers: dict[str, QuoteMatcher]) -> list[Asset]:
    """Attach each matcher's quote to the assets whose symbol it knows.

    Sources that do not know a symbol leave no entry behind for it.
    """
    merged: list[Asset] = []
    for asset in assets:
        quotes = {}
        for source_name, matcher in matchers.items():
            price = matcher.try_match(asset.symbol)
            if price is not None:
                quotes[source_name] = price
        merged.append(asset.model_copy(update={"supplemental_quotes": quotes}))
    return merged


def reselect(previous: Asset | None, assets: Sequence[Asset]) -> Asset | None:
    """First asset when nothing was selected, the refreshed copy of the prior selection, else None."""
    if previous is None:
        return assets[0] if assets else None
    for asset in assets:
        if asset.id == previous.id:
            return asset
    return None


class MarketDataAggregator:
    """Owns the ``AggregateView`` and runs refresh cycles over the price sources.

    A ``refresh()`` issued while another cycle is in flight joins that cycle
    instead of starting a second one.
    """

    def __init__(
        self,
        primary: PrimarySource,
        supplementals: Sequence[SupplementalSource] = (),
        *,
        supplemental_timeout: float = DEFAULT_SUPPLEMENTAL_TIMEOUT,
        clock: Callable[[], datetime] | None = None,
        metrics: MetricsCollector | None = None,
    ):
        if supplemental_timeout <= 0:
            raise ValueError("supplemental_timeout must be positive")
        names = [primary.name, *(source.name for source in supplementals)]
        if len(set(names)) != len(names):
            raise ValueError(f"source names must be unique: {names}")

        self.primary = primary
        self.supplementals = list(supplementals)
        self.supplemental_timeout = supplemental_timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._metrics = metrics
        self._view = AggregateView(source_statuses=self._initial_statuses())
        self._inflight: asyncio.Task[AggregateView] | None = None

    def _initial_statuses(self) -> dict[str, SourceStatus]:
        return {
            source.name: SourceStatus(source=source.name, role=source.role)
            for source in (self.primary, *self.supplementals)
        }

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics or get_metrics_collector()

    @property
    def view(self) -> AggregateView:
        return self._view

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def _publish(self, **changes: Any) -> AggregateView:
        self._view = self._view.model_copy(update=changes)
        return self._view

    async def refresh(self) -> AggregateView:
        """Run one full cycle (or join the running one) and return the resulting view."""
        if self.is_refreshing:
            logger.debug("Refresh already in flight, joining it")
            return await asyncio.shield(self._inflight)

        task = asyncio.ensure_future(self._run_cycle())
        self._inflight = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

    async def retry(self) -> AggregateView:
        """Manual retry; always re-runs the whole cycle, primary included."""
        return await self.refresh()

    async def _run_cycle(self) -> AggregateView:
        with log_context(operation="refresh"):
            logger.info("Refresh cycle started")
            self._publish(
                source_statuses={
                    name: status if status.state == SourceState.LOADING else status.begin()
                    for name, status in self._view.source_statuses.items()
                },
                error=None,
                refreshing=True,
            )

            primary_result = await self.primary.fetch()
            self._record(primary_result)
            primary_done = self._clock()
            statuses = dict(self._view.source_statuses)

            if not primary_result.ok:
                return self._abort(primary_result.error, primary_done, statuses)

            statuses[self.primary.name] = statuses[self.primary.name].succeed(primary_done)
            matchers: dict[str, QuoteMatcher] = {}
            results = await self._fetch_supplementals()
            resolved_at = self._clock()
            for result in results:
                if result.ok:
                    matchers[result.source] = result.payload
                    statuses[result.source] = statuses[result.source].succeed(resolved_at)
                else:
                    statuses[result.source] = statuses[result.source].fail(result.error, resolved_at)

            assets = merge_quotes(primary_result.payload, matchers)
            view = self._publish(
                assets=tuple(assets),
                selected=reselect(self._view.selected, assets),
                source_statuses=statuses,
                error=None,
                refreshing=False,
            )
            self.metrics.record_cycle("success")
            logger.info(
                f"Refresh cycle finished: {len(assets)} assets, "
                f"{len(matchers)}/{len(self.supplementals)} supplemental sources"
            )
            return view

    def _abort(
        self,
        error: SourceUnavailableError,
        failed_at: datetime,
        statuses: dict[str, SourceStatus],
    ) -> AggregateView:
        failure = AggregationFailedError(f"Primary source {self.primary.name} failed: {error.message}", cause=error)
        statuses[self.primary.name] = statuses[self.primary.name].fail(error, failed_at)
        for source in self.supplementals:
            skipped = SourceUnavailableError(
                f"{source.name} not attempted because the primary source failed",
                source.name,
                reason="skipped",
            )
            logger.bind(source=source.name, error_code=skipped.error_code.value).warning(skipped.message)
            statuses[source.name] = statuses[source.name].fail(skipped, None)

        # assets and selection stay as they were: stale data beats an empty table
        view = self._publish(source_statuses=statuses, error=failure.to_payload(), refreshing=False)
        self.metrics.record_cycle("failed")
        logger.bind(source=self.primary.name, error_code=failure.error_code.value).error(failure.message)
        return view

    async def _fetch_supplementals(self) -> list[FetchResult]:
        outcomes = await asyncio.gather(
            *(self._bounded_fetch(source) for source in self.supplementals),
            return_exceptions=True,
        )
        results: list[FetchResult] = []
        for source, outcome in zip(self.supplementals, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.opt(exception=outcome).bind(source=source.name).error(
                    f"{source.name} raised unexpectedly"
                )
                outcome = FetchResult(
                    source=source.name,
                    error=SourceUnavailableError(f"{source.name} failed: {outcome}", source.name),
                )
                self.metrics.increment_failure(source.name)
            results.append(outcome)
        return results

    async def _bounded_fetch(self, source: SupplementalSource) -> FetchResult:
        try:
            result = await asyncio.wait_for(source.fetch(), timeout=self.supplemental_timeout)
        except asyncio.TimeoutError:
            error = SourceUnavailableError(
                f"{source.name} did not respond within {self.supplemental_timeout}s",
                source.name,
                reason="timeout",
            )
            logger.bind(source=source.name, error_code=error.error_code.value).warning(error.message)
            self.metrics.increment_failure(source.name)
            return FetchResult(source=source.name, error=error, elapsed=self.supplemental_timeout)
        self._record(result)
        return result

    def _record(self, result: FetchResult) -> None:
        self.metrics.observe_fetch(result.source, result.elapsed, success=result.ok)
        if result.ok:
            logger.bind(source=result.source).info(f"{result.source} fetched in {result.elapsed:.3f}s")

    def select(self, asset_id: str | None) -> AggregateView:
        """Select an asset by id; an unknown id clears the selection. No I/O."""
        asset = self._view.find(asset_id) if asset_id else None
        return self._publish(selected=asset)

    def set_query(self, text: str) -> AggregateView:
        """Update the search text used by ``AggregateView.filtered_assets``. No I/O."""
        return self._publish(query=text or "")

    def restore(self, view: AggregateView) -> AggregateView:
        """Install a persisted view; configured sources missing from it start idle."""
        statuses = self._initial_statuses()
        for name in statuses:
            if name in view.source_statuses:
                statuses[name] = view.source_statuses[name]
        self._view = view.model_copy(update={"source_statuses": statuses, "refreshing": False})
        return self._view

    async def close(self) -> None:
        for source in (self.primary, *self.supplementals):
            await source.close()


__all__ = ["MarketDataAggregator", "merge_quotes", "reselect", "DEFAULT_SUPPLEMENTAL_TIMEOUT"]
