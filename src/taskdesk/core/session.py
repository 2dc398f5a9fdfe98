"""SessionContext -- 会话上下文（模拟认证）

显式的会话对象，通过依赖注入传给调用方，接口为
current_user / sign_in / sign_up / sign_out。
认证后端为模拟实现：任意合法格式的凭据都可登录，当前用户以 JSON 文件持久化。
"""

from pathlib import Path

import structlog
from pydantic import ValidationError
from ulid import ULID

from .exceptions import SessionError
from .models.user import User

log = structlog.get_logger()

# 注册时的最短密码长度
MIN_PASSWORD_LENGTH = 6


def _validate_credentials(email: str, password: str) -> str:
    """校验凭据格式，返回规范化后的邮箱"""
    email = email.strip()
    if not email or "@" not in email:
        raise SessionError("Please enter a valid email!")
    if not password:
        raise SessionError("Please input your password!")
    return email


class SessionContext:
    """会话上下文 -- 当前用户持久化到本地 JSON 文件"""

    def __init__(self, session_path: str | Path) -> None:
        self._path = Path(session_path)
        self._user: User | None = self._load()

    @property
    def current_user(self) -> User | None:
        """当前登录用户，未登录时为 None"""
        return self._user

    async def sign_in(self, email: str, password: str) -> User:
        """登录并持久化当前用户

        Raises:
            SessionError: 凭据格式不合法
        """
        email = _validate_credentials(email, password)
        user = User(id=str(ULID()), email=email)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(user.model_dump_json(), encoding="utf-8")
        self._user = user

        log.info("session_signed_in", user_id=user.id, email=email)
        return user

    async def sign_up(self, email: str, password: str) -> None:
        """注册（模拟）：只校验凭据，不自动登录

        Raises:
            SessionError: 凭据格式不合法或密码过短
        """
        email = _validate_credentials(email, password)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise SessionError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters!"
            )
        log.info("session_signed_up", email=email)

    async def sign_out(self) -> None:
        """登出并清除持久化的用户"""
        self._path.unlink(missing_ok=True)
        previous, self._user = self._user, None
        log.info("session_signed_out", user_id=previous.id if previous else None)

    def _load(self) -> User | None:
        if not self._path.exists():
            return None
        try:
            return User.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            # 损坏的会话文件视为未登录，不阻塞启动
            log.warning("session_file_invalid", path=str(self._path), error=str(e))
            return None
