"""cycleledger: cycle-based business expense and income tracker."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .services.tracker import CycleTracker, create_tracker

__all__ = ["BaseConfig", "CycleTracker", "DevConfig", "create_tracker"]
