"""Admin login and the session dependency guarding catalog and order history routes."""
import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from smartorder.core.config import settings

router = APIRouter()
logger = logging.getLogger(__name__)

SESSION_COOKIE = "admin_session"
SESSION_LIFETIME = timedelta(hours=12)


class AdminSession(BaseModel):
    """Logged-in admin browser."""
    token: str
    created_at: datetime
    expires_at: datetime

    def expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at


# Cleared on restart; admins log in again
_sessions: Dict[str, AdminSession] = {}


class LoginRequest(BaseModel):
    password: str


class SessionInfo(BaseModel):
    authenticated: bool
    expires_at: Optional[str] = None


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def check_password(password: str) -> bool:
    """Compare against DASHBOARD_PASSWORD in constant time."""
    return secrets.compare_digest(
        hash_password(password), hash_password(settings.dashboard_password)
    )


def open_session(response: Response) -> AdminSession:
    """Start an admin session and hand its token to the browser as a cookie."""
    now = datetime.now(timezone.utc)
    session = AdminSession(
        token=secrets.token_urlsafe(32),
        created_at=now,
        expires_at=now + SESSION_LIFETIME,
    )
    _sessions[session.token] = session
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        httponly=True,
        max_age=int(SESSION_LIFETIME.total_seconds()),
        samesite="lax",
    )
    return session


def find_session(token: Optional[str]) -> Optional[AdminSession]:
    """Live session for a cookie token. Expired sessions are discarded."""
    if not token:
        return None
    session = _sessions.get(token)
    if session is None:
        return None
    if session.expired():
        _sessions.pop(token, None)
        logger.info("[AUTH] Admin session expired")
        return None
    return session


async def require_auth(request: Request) -> AdminSession:
    """Dependency for admin routes: 401 without a live session cookie."""
    session = find_session(request.cookies.get(SESSION_COOKIE))
    if session is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return session


@router.post("/api/auth/login")
async def login(body: LoginRequest, response: Response):
    if not check_password(body.password):
        logger.warning("[AUTH] Rejected admin login attempt")
        raise HTTPException(status_code=401, detail="Invalid password")

    session = open_session(response)
    logger.info("[AUTH] Admin logged in")
    return {
        "success": True,
        "message": "Login successful",
        "expires_at": session.expires_at.isoformat(),
    }


@router.post("/api/auth/logout")
async def logout(request: Request, response: Response):
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        _sessions.pop(token, None)
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True, "message": "Logged out"}


@router.get("/api/auth/session", response_model=SessionInfo)
async def get_session_info(request: Request):
    session = find_session(request.cookies.get(SESSION_COOKIE))
    if session is None:
        return SessionInfo(authenticated=False)
    return SessionInfo(authenticated=True, expires_at=session.expires_at.isoformat())
