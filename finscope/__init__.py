"""finscope - personal finance dashboard core.

Aggregates crypto prices from several public APIs, values a personal
portfolio against them and keeps a manually entered bank ledger.
"""

from finscope.core.client import Dashboard
from finscope.core.config import ConfigManager, FinscopeConfig
from finscope.core.exceptions import (
    AggregationFailedError,
    FinscopeError,
    InputValidationError,
    SourceUnavailableError,
)
from finscope.core.logging import configure_logging
from finscope.core.models import AggregateView, Asset, Holding, SourceState, SourceStatus
from finscope.core.services import NOT_AVAILABLE, TimeRange, valuate

__version__ = "0.1.0"

_dashboard: Dashboard | None = None


def get_dashboard() -> Dashboard:
    """Return the global dashboard, configuring logging from the loaded config."""
    global _dashboard
    if _dashboard is None:
        config = ConfigManager().get_config()
        configure_logging(
            config.logging.level,
            console_output=config.logging.console,
            file_output=config.logging.file is not None,
            file_path=config.logging.file,
        )
        _dashboard = Dashboard(config)
    return _dashboard


async def refresh() -> AggregateView:
    """Refresh market data on the global dashboard."""
    return await get_dashboard().refresh()


__all__ = [
    "__version__",
    "Dashboard",
    "get_dashboard",
    "refresh",
    "FinscopeConfig",
    "FinscopeError",
    "AggregationFailedError",
    "InputValidationError",
    "SourceUnavailableError",
    "AggregateView",
    "Asset",
    "Holding",
    "SourceState",
    "SourceStatus",
    "NOT_AVAILABLE",
    "TimeRange",
    "valuate",
]
