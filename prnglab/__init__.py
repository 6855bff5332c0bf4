"""Pseudo-random number generation laboratory."""

from .analysis import BatterySummary, summarise_battery
from .app import PrngLabApp, RunResult

__all__ = [
    "BatterySummary",
    "PrngLabApp",
    "RunResult",
    "summarise_battery",
]
