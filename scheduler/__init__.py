from .scheduler import (
    PassInProgressError,
    SchedulerController,
    SchedulerState,
    SchedulerStatus,
    StopOutcome,
    create_controller,
)

__all__ = [
    "PassInProgressError",
    "SchedulerController",
    "SchedulerState",
    "SchedulerStatus",
    "StopOutcome",
    "create_controller",
]
