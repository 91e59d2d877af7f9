from __future__ import annotations

from functools import wraps
from typing import Sequence

from flask import g

from ..core.exceptions import AuthorizationError
from .context import ANONYMOUS, AuthContext


def current_auth() -> AuthContext:
    return getattr(g, "auth", None) or ANONYMOUS


def permission_required(*permissions: str, require_all: bool = False):
    """403 unless the acting user holds the permission(s); any-of by default."""

    perms: Sequence[str] = tuple(permissions)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            auth = current_auth()
            if auth.user is None:
                raise AuthorizationError("ログインしてください")
            if not auth.allows(permissions=perms, require_all=require_all):
                raise AuthorizationError("この操作を行う権限がありません")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def login_required(view):
    """Any acting user; nothing is required of the role."""
    return permission_required()(view)
