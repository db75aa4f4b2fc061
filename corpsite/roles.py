"""Admin roles.

``super`` operates the system (policy, backup, inquiries) and may edit any
content key; ``admin`` edits only the content keys the access policy allows.
"""

from __future__ import annotations

from typing import Literal, cast

Role = Literal["admin", "super"]

ROLES: tuple[Role, Role] = ("admin", "super")


def is_role(value: object) -> bool:
    return value in ROLES


def to_role(value: object) -> Role | None:
    return cast(Role, value) if is_role(value) else None


def satisfies(role: Role | None, required: Role) -> bool:
    """Any authenticated role satisfies ``admin``; only ``super`` satisfies ``super``."""
    if role is None:
        return False
    if required == "admin":
        return True
    return role == "super"


__all__ = ["Role", "ROLES", "is_role", "to_role", "satisfies"]
