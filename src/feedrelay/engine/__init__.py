"""Poll cycle engine."""

from feedrelay.engine.poll import CycleStats, PollCycleEngine

__all__ = ["CycleStats", "PollCycleEngine"]
