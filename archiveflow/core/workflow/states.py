"""
Upload workflow steps.

Each step is a frozen dataclass; exactly one is current at any time.
"""
from dataclasses import dataclass
from typing import Dict, Tuple, Type, Union


@dataclass(frozen=True)
class Idle:
    """No file selected."""
    name = 'idle'


@dataclass(frozen=True)
class Reviewing:
    """File selected, metadata being reviewed."""
    name = 'reviewing'


@dataclass(frozen=True)
class Uploading:
    """Transfer in progress."""
    progress: float = 0
    name = 'uploading'


@dataclass(frozen=True)
class Succeeded:
    """Upload accepted by the service."""
    url: str
    identifier: str
    name = 'succeeded'


@dataclass(frozen=True)
class Failed:
    """Upload rejected or interrupted."""
    message: str
    is_auth_error: bool = False
    name = 'failed'


StepState = Union[Idle, Reviewing, Uploading, Succeeded, Failed]

# Idle is reachable from every step through reset and is not listed
TRANSITIONS: Dict[Type, Tuple[Type, ...]] = {
    Idle: (Reviewing,),
    Reviewing: (Reviewing, Uploading),
    Uploading: (Uploading, Succeeded, Failed),
    Succeeded: (),
    Failed: (Reviewing,),
}


def can_transition(current: StepState, target: StepState) -> bool:
    """Check whether moving from current to target is allowed."""
    if isinstance(target, Idle):
        return True
    return type(target) in TRANSITIONS.get(type(current), ())
