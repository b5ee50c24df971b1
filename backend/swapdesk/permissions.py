"""
Capability Constants and Role Mappings

WHY: Authorization lives in exactly one place. Routes declare the capability
they need (decorators.require_capability); this module decides which roles
hold it. Services never re-check roles: they trust the verified caller the
request layer hands them.

DESIGN PRINCIPLES:
- Capabilities are granular (one action per capability)
- Default role mappings follow principle of least privilege
- Managers hold every staff capability
"""

from .validation import AuthorizationError

# =============================================================================
# CAPABILITY DEFINITIONS
# =============================================================================

# Each capability is defined as: (code, description)
CAPABILITY_DEFINITIONS = [
    ("VIEW_DASHBOARD", "View own dashboard counters and audit trail"),
    ("MANAGE_OWN_SHIFTS", "Create and list own shifts"),
    ("REQUEST_SWAP", "Create and list own swap requests"),
    ("VOLUNTEER", "Browse open swap requests and volunteer to cover them"),
    ("APPROVE_SWAPS", "Approve or reject pending swap requests"),
    ("VIEW_ANALYTICS", "View department activity and recent decisions"),
    ("EXPORT_DECISIONS", "Export recent decisions as CSV"),
]

ALL_CAPABILITIES = frozenset(code for code, _ in CAPABILITY_DEFINITIONS)


# =============================================================================
# DEFAULT ROLE MAPPINGS
# =============================================================================

STAFF_CAPABILITIES = frozenset({
    "VIEW_DASHBOARD",
    "MANAGE_OWN_SHIFTS",
    "REQUEST_SWAP",
    "VOLUNTEER",
})

ROLE_CAPABILITIES = {
    "staff": STAFF_CAPABILITIES,
    "manager": ALL_CAPABILITIES,
}


def capabilities_for_role(role: str | None) -> frozenset:
    return ROLE_CAPABILITIES.get(role or "", frozenset())


def role_has_capability(role: str | None, capability: str) -> bool:
    return capability in capabilities_for_role(role)


def require_capability(role: str | None, capability: str) -> None:
    """
    Raises:
        AuthorizationError: role does not hold capability
    """
    if not role_has_capability(role, capability):
        raise AuthorizationError(f"Role '{role}' lacks {capability}")
