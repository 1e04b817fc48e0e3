"""Role-based permission predicates.

Every predicate is pure and total: it accepts a ``Role``, a raw role string,
or ``None``, and anything that does not parse to a known role is denied.
"""

from typing import Any

from gello.models.user import Role

_MANAGERS = frozenset({Role.ADMIN, Role.MANAGER})


def _role(role: Any) -> Role | None:
    return Role.parse(role)


def is_admin(role: Any) -> bool:
    return _role(role) is Role.ADMIN


def is_manager(role: Any) -> bool:
    return _role(role) is Role.MANAGER


def is_member(role: Any) -> bool:
    return _role(role) is Role.MEMBER


def can_manage_team(role: Any) -> bool:
    return _role(role) in _MANAGERS


def can_manage_board(role: Any) -> bool:
    return _role(role) in _MANAGERS


def can_manage_list(role: Any) -> bool:
    return _role(role) in _MANAGERS


def can_manage_task(role: Any) -> bool:
    return _role(role) in _MANAGERS


def can_view_all_users(role: Any) -> bool:
    return _role(role) is Role.ADMIN


def can_manage_users(role: Any) -> bool:
    return _role(role) is Role.ADMIN
