"""
User roles enumeration.

Defines the role types for the placement ledger backend.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Full access, including locked transactions and user management
        STAFF: Office staff; access limited to the modules assigned to them
        CANDIDATE: Portal user linked to one candidate record (read-only)
    """
    ADMIN = "admin"
    STAFF = "staff"
    CANDIDATE = "candidate"
