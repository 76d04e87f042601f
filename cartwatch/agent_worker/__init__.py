"""
Agent worker package: background orchestration.

The scheduler polls candidate carts on a fixed interval and runs the
inactivity → enrichment → decision → notification pipeline per user. The
runtime module wires it to HTTP collaborators and handles shutdown.
"""

from cartwatch.agent_worker.candidates import CandidateSource, StaticCandidateSource
from cartwatch.agent_worker.runner import (
    CartAbandonmentScheduler,
    SchedulerConfig,
    SchedulerState,
    TickReport,
    UserOutcome,
)

__all__ = [
    "CandidateSource",
    "CartAbandonmentScheduler",
    "SchedulerConfig",
    "SchedulerState",
    "StaticCandidateSource",
    "TickReport",
    "UserOutcome",
]
