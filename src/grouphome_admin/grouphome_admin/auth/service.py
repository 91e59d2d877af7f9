from __future__ import annotations

from typing import Optional

from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..roles.repository import RoleRepository
from ..users.model import User
from ..users.repository import UserRepository
from .context import AuthContext
from .permissions import DEFAULT_ROLE_TABLE, build_role_table

logger = get_logger(__name__)


class AuthService:
    """Resolves the acting user.

    There is no login form: the session may pin a user (demo user selector),
    otherwise the first admin is used.
    """

    def __init__(self, users: UserRepository, roles: RoleRepository):
        self._users = users
        self._roles = roles

    def role_table(self) -> dict[str, frozenset]:
        roles = self._roles.list_all()
        return build_role_table(roles) if roles else dict(DEFAULT_ROLE_TABLE)

    def default_user(self) -> Optional[User]:
        for u in self._users.list_all():
            if u.role == "admin":
                return u
        return None

    def resolve(self, session_user_id: Optional[int], *, logged_out: bool = False) -> AuthContext:
        table = self.role_table()
        if logged_out:
            return AuthContext(user=None, role_table=table)
        user = self._users.get_by_id(int(session_user_id)) if session_user_id else None
        if user is None:
            user = self.default_user()
        return AuthContext(user=user, role_table=table)

    def switch_user(self, user_id: int) -> AuthContext:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("職員が見つかりません")
        logger.info("session switched to user id=%s role=%s", user.id, user.role)
        return AuthContext(user=user, role_table=self.role_table())
