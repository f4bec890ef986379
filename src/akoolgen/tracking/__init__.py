"""Tracking of asynchronous generation jobs.

Modules
-------
models
    ``Job`` record and ``JobKind``.
scheduler
    Keyed, cancellable polling cycles.
tracker
    ``JobTracker`` plus the pure merge and termination rules.
visibility
    Which jobs and action buttons the presentation layer shows.
"""

from akoolgen.tracking.models import Job, JobKind
from akoolgen.tracking.scheduler import AsyncioPollScheduler, PollScheduler
from akoolgen.tracking.tracker import JobTracker, is_terminal, merge_snapshot
from akoolgen.tracking.visibility import ActionButton, action_buttons, is_visible

__all__ = [
    "ActionButton",
    "AsyncioPollScheduler",
    "Job",
    "JobKind",
    "JobTracker",
    "PollScheduler",
    "action_buttons",
    "is_terminal",
    "is_visible",
    "merge_snapshot",
]
