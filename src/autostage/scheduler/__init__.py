"""Scheduler — per-path debounce and dedup."""

from autostage.scheduler.debounce import PathState, PendingState, Scheduler, StagingRequest

__all__ = ["PathState", "PendingState", "Scheduler", "StagingRequest"]
