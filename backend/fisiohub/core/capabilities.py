"""Capability table: which roles may perform which operation.

Routes name a capability; the auth gate looks it up here. This is the only
place role-based access is decided.
"""

from types import MappingProxyType
from typing import Mapping

from fisiohub.models.user import UserRole

ALL_ROLES = frozenset(UserRole)
CLINICAL_ROLES = frozenset(
    {UserRole.ADMIN, UserRole.THERAPIST, UserRole.DOCTOR, UserRole.NURSE}
)
ADMIN_ONLY = frozenset({UserRole.ADMIN})

CAPABILITIES: Mapping[str, frozenset[UserRole]] = MappingProxyType(
    {
        # Tenant
        "tenant:read": ALL_ROLES,
        "tenant:manage": ADMIN_ONLY,
        # Users
        "users:read": ALL_ROLES,
        "users:manage": ADMIN_ONLY,
        # Patients
        "patients:read": ALL_ROLES,
        "patients:write": ALL_ROLES,
        "patients:delete": ADMIN_ONLY,
        # Appointments
        "appointments:read": ALL_ROLES,
        "appointments:write": ALL_ROLES,
        # Clinical records
        "evolutions:read": CLINICAL_ROLES,
        "evolutions:write": CLINICAL_ROLES,
        "scales:read": CLINICAL_ROLES,
        "scales:write": CLINICAL_ROLES,
        "indicators:read": CLINICAL_ROLES,
        "indicators:write": CLINICAL_ROLES,
        # Clinical services
        "services:read": ALL_ROLES,
        "services:manage": ADMIN_ONLY,
        # Dashboard
        "dashboard:read": ALL_ROLES,
    }
)


def allowed_roles(capability: str) -> frozenset[UserRole]:
    """
    Roles allowed to exercise a capability.

    Raises:
        KeyError: If the capability is not declared (a programming error)
    """
    return CAPABILITIES[capability]


def is_allowed(role: UserRole, capability: str) -> bool:
    """Whether ``role`` holds ``capability``."""
    return role in allowed_roles(capability)
