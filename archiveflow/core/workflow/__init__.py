"""Upload workflow state machine."""
from .states import Idle, Reviewing, Uploading, Succeeded, Failed, StepState, can_transition
from .orchestrator import UploadWorkflow

__all__ = [
    'UploadWorkflow',
    'StepState',
    'Idle',
    'Reviewing',
    'Uploading',
    'Succeeded',
    'Failed',
    'can_transition',
]
