"""Per-turn response state: snapshots, the state machine and the observable cell."""

from .machine import ResponseStateMachine
from .models import FailureKind, ResponseState, ResponseStatus
from .observable import StateCell

__all__ = [
    "FailureKind",
    "ResponseState",
    "ResponseStateMachine",
    "ResponseStatus",
    "StateCell",
]
