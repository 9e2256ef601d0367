"""Scheduler for periodic poll cycles."""

from feedrelay.scheduler.loop import PollScheduler, ScheduleState

__all__ = ["PollScheduler", "ScheduleState"]
