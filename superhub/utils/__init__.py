"""Shared utilities for the Super Hub client.

Convenience re-exports so consumers can import directly from
``superhub.utils`` (e.g. ``from superhub.utils import Countdown``).
"""

from superhub.utils.audit import AuditAction, AuditEvent, log_audit_event
from superhub.utils.countdown import Countdown, DelayedAction, Scheduler

__all__ = [
    "AuditAction",
    "AuditEvent",
    "Countdown",
    "DelayedAction",
    "Scheduler",
    "log_audit_event",
]
