# backend/app/auth.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Any

import jwt  # PyJWT
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .models import AdminUser


@dataclass(frozen=True)
class Principal:
    user_id: int
    email: str
    role: str  # viewer | editor | admin


ROLE_ORDER = {"viewer": 1, "editor": 2, "admin": 3}


def _require_role(principal: Principal, min_role: str) -> None:
    if ROLE_ORDER.get(principal.role, 0) < ROLE_ORDER.get(min_role, 999):
        raise HTTPException(status_code=403, detail=f"Requires role >= {min_role}")


# -------------------------
# JWT helpers
# -------------------------
def _jwt_sign(payload: dict[str, Any]) -> str:
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def _jwt_verify(token: str) -> dict[str, Any]:
    try:
        return dict(jwt.decode(token, settings.jwt_secret, algorithms=["HS256"]))
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def issue_token(user: AdminUser, *, minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=int(minutes or settings.jwt_exp_minutes))
    return _jwt_sign(
        {
            "sub": str(user.id),
            "email": user.email,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
    )


# -------------------------
# get_principal
# -------------------------
def _dev_principal(db: Session, request: Request) -> Principal:
    email = (request.headers.get(settings.dev_header_admin_email) or "").strip().lower()
    role_hint = (request.headers.get(settings.dev_header_admin_role) or "admin").strip().lower()
    if not email:
        raise HTTPException(status_code=401, detail=f"Missing {settings.dev_header_admin_email} for dev auth")

    user = db.scalar(select(AdminUser).where(AdminUser.email == email))
    if user is None:
        if not settings.dev_auto_provision:
            raise HTTPException(status_code=401, detail="Unknown admin user")
        user = AdminUser(
            email=email,
            display_name=email.split("@")[0],
            role=role_hint if role_hint in ROLE_ORDER else "admin",
            created_at=datetime.utcnow(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)

    return Principal(user_id=int(user.id), email=str(user.email), role=str(user.role))


def get_principal(
    request: Request,
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Principal:
    """
    Auth modes supported (in priority order):
      1) JWT cookie (HttpOnly) OR Authorization: Bearer <token>
      2) dev header spoofing (ONLY if settings.auth_mode == "dev")
    """
    token = request.cookies.get(settings.jwt_cookie_name) if settings.jwt_cookie_name else None
    if not token and authorization and str(authorization).lower().startswith("bearer "):
        token = str(authorization).split(" ", 1)[1].strip()

    if token:
        claims = _jwt_verify(token)
        sub = str(claims.get("sub") or "")
        if not sub.isdigit():
            raise HTTPException(status_code=401, detail="Token missing sub")

        user = db.scalar(select(AdminUser).where(AdminUser.id == int(sub)))
        if user is None:
            raise HTTPException(status_code=401, detail="Unknown user")
        return Principal(user_id=int(user.id), email=str(user.email), role=str(user.role))

    if settings.auth_mode == "dev":
        return _dev_principal(db, request)

    raise HTTPException(status_code=401, detail="Not authenticated")


def require_editor(p: Principal = Depends(get_principal)) -> Principal:
    _require_role(p, "editor")
    return p


def require_admin(p: Principal = Depends(get_principal)) -> Principal:
    _require_role(p, "admin")
    return p
