"""Scheduling services subpackage."""

from .polling_scheduler import MessagesCallback, PollingScheduler, TrackedAddress

__all__ = ["MessagesCallback", "PollingScheduler", "TrackedAddress"]
