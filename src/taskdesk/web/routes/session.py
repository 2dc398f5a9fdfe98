"""会话路由 -- 模拟认证

GET /api/session: 当前用户。
POST /api/session/sign-in | sign-up | sign-out
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from taskdesk.core.exceptions import SessionError
from taskdesk.core.models import User
from taskdesk.core.session import SessionContext

from ..deps import get_session
from .tasks import error_response

router = APIRouter()


class Credentials(BaseModel):
    """登录/注册凭据"""

    email: str
    password: str


class SessionResponse(BaseModel):
    """会话状态"""

    user: User | None


@router.get("/api/session", response_model=SessionResponse)
async def current_session(session: SessionContext = Depends(get_session)):
    return SessionResponse(user=session.current_user)


@router.post("/api/session/sign-in", response_model=SessionResponse)
async def sign_in(body: Credentials, session: SessionContext = Depends(get_session)):
    """登录"""
    try:
        user = await session.sign_in(body.email, body.password)
    except SessionError as e:
        return error_response(401, "SESSION_REJECTED", str(e))
    return SessionResponse(user=user)


@router.post("/api/session/sign-up", status_code=201, response_model=SessionResponse)
async def sign_up(body: Credentials, session: SessionContext = Depends(get_session)):
    """注册（不自动登录）"""
    try:
        await session.sign_up(body.email, body.password)
    except SessionError as e:
        return error_response(401, "SESSION_REJECTED", str(e))
    return SessionResponse(user=session.current_user)


@router.post("/api/session/sign-out", response_model=SessionResponse)
async def sign_out(session: SessionContext = Depends(get_session)):
    """登出"""
    await session.sign_out()
    return SessionResponse(user=None)
