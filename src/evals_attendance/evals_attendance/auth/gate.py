from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import FrozenSet

from flask import current_app, g, request

from ..core.constants import DEFAULT_AUTH_GROUPS_HEADER, DEFAULT_AUTH_USER_HEADER
from ..core.enums import Group
from ..core.exceptions import AuthenticationError, AuthorizationError


@dataclass(frozen=True)
class UserInfo:
    """User context handed over by the authenticating proxy."""

    uid: str
    groups: FrozenSet[str] = field(default_factory=frozenset)

    def in_group(self, group: Group) -> bool:
        return group.value in self.groups

    @property
    def is_eboard(self) -> bool:
        return self.in_group(Group.EBOARD)


DEV_USER = UserInfo(uid="dev", groups=frozenset(grp.value for grp in Group))


def current_user() -> UserInfo:
    """Resolve (once per request) the authenticated user.

    With ``AUTH_ENABLED`` off every request acts as a development user in
    every group.
    """

    if "user_info" in g:
        return g.user_info

    if not current_app.config.get("AUTH_ENABLED", True):
        g.user_info = DEV_USER
        return g.user_info

    user_header = current_app.config.get("AUTH_USER_HEADER", DEFAULT_AUTH_USER_HEADER)
    groups_header = current_app.config.get("AUTH_GROUPS_HEADER", DEFAULT_AUTH_GROUPS_HEADER)

    uid = (request.headers.get(user_header) or "").strip()
    if not uid:
        raise AuthenticationError("Not authenticated")

    groups = {s.strip() for s in (request.headers.get(groups_header) or "").split(",") if s.strip()}
    # Anyone the proxy lets through is a member.
    groups.add(Group.MEMBER.value)
    g.user_info = UserInfo(uid=uid, groups=frozenset(groups))
    return g.user_info


def require_group(group: Group):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if not user.in_group(group):
                raise AuthorizationError(f"Requires '{group.value}' group")
            return view(*args, **kwargs)

        return wrapper

    return decorator


member_only = require_group(Group.MEMBER)
eboard_only = require_group(Group.EBOARD)
evals_only = require_group(Group.EVALS)
