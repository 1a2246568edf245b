"""ADBOARD — Role-Based Permission Model.

Role hierarchy: admin > user > client.

`has_permission` is the single authorization decision used by every route.
It is pure and never raises; denial is `False` and the HTTP layer decides
what the caller sees.
"""

from typing import Any, FrozenSet, Iterable, Optional, Union

from app.models.domain_models import UserRole

RoleLike = Union[UserRole, str]


def _coerce_role(value: RoleLike) -> Optional[UserRole]:
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        return None


class Permission:
    """Requirement satisfied by one role or any of a set of roles."""

    __slots__ = ("roles",)

    def __init__(self, roles: Iterable[RoleLike]):
        coerced = (_coerce_role(r) for r in roles)
        self.roles: FrozenSet[UserRole] = frozenset(r for r in coerced if r is not None)

    @classmethod
    def of(cls, required: Union["Permission", RoleLike, Iterable[RoleLike]]) -> "Permission":
        """Normalize a bare role, a collection of roles, or a Permission.

        Anything else (None, a number) is a requirement nobody meets.
        """
        if isinstance(required, Permission):
            return required
        if isinstance(required, (UserRole, str)):
            return cls([required])
        if not isinstance(required, Iterable):
            return cls([])
        return cls(required)

    def allows(self, role: UserRole) -> bool:
        return role in self.roles

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Permission) and self.roles == other.roles

    def __hash__(self) -> int:
        return hash(self.roles)

    def __repr__(self) -> str:
        names = ", ".join(sorted(r.value for r in self.roles))
        return f"<Permission {names}>"


# Common requirements
ADMIN_ONLY = Permission([UserRole.ADMIN])
STAFF = Permission([UserRole.ADMIN, UserRole.USER])
ANY_ROLE = Permission(list(UserRole))


def role_of(user: Any) -> Optional[UserRole]:
    """Return the user's role as a UserRole, or None if unknown."""
    if user is None:
        return None
    raw = user.get("role") if isinstance(user, dict) else getattr(user, "role", None)
    if raw is None:
        return None
    return _coerce_role(raw)


def has_permission(
    user: Any, required: Union[Permission, RoleLike, Iterable[RoleLike]]
) -> bool:
    """Decide whether `user` satisfies `required`.

    Admin always passes. Anyone else passes only when their own role is the
    required role, or is in the required set. No implicit escalation: a
    client never satisfies a bare "user" requirement.
    """
    role = role_of(user)
    if role is None:
        return False
    if role is UserRole.ADMIN:
        return True
    return Permission.of(required).allows(role)


def can_view_customer(user: Any, customer: Any) -> bool:
    """Staff see every customer; a client sees only customers assigned to it."""
    if has_permission(user, STAFF):
        return True
    if role_of(user) is not UserRole.CLIENT or customer is None:
        return False
    user_id = user.get("id") if isinstance(user, dict) else getattr(user, "id", None)
    owner = (
        customer.get("user_id")
        if isinstance(customer, dict)
        else getattr(customer, "user_id", None)
    )
    return user_id is not None and owner == user_id
