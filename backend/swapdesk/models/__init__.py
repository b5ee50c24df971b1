from .auth import User, SessionToken, USER_ROLES
from .scheduling import Shift, SwapRequest, SWAP_PRIORITIES, SWAP_STATUSES, DECIDED_STATUSES
from .audit import AuditLog

__all__ = [
    'User', 'SessionToken', 'USER_ROLES',
    'Shift', 'SwapRequest', 'SWAP_PRIORITIES', 'SWAP_STATUSES', 'DECIDED_STATUSES',
    'AuditLog',
]
