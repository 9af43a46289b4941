"""
Completion verification.

Waits for the Internet Archive to finish deriving an uploaded item.
"""
from .models import VerificationState, ItemStatus
from .checker import DerivativeChecker
from .poller import DerivativePoller, ReadinessChecker

__all__ = [
    'VerificationState',
    'ItemStatus',
    'DerivativeChecker',
    'DerivativePoller',
    'ReadinessChecker',
]
