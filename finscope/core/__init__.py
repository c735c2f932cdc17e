"""Core module of finscope."""

from finscope.core.client import Dashboard
from finscope.core.config import FinscopeConfig
from finscope.core.exceptions import FinscopeError
from finscope.core.models import AggregateView, Asset, Holding, SourceStatus

__all__ = [
    "Dashboard",
    "FinscopeConfig",
    "FinscopeError",
    "AggregateView",
    "Asset",
    "Holding",
    "SourceStatus",
]
