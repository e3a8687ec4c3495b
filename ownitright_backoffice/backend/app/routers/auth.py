# backend/app/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from ..auth import Principal, get_principal
from ..config import settings
from ..schemas import PrincipalOut

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=PrincipalOut)
def me(p: Principal = Depends(get_principal)):
    return PrincipalOut(user_id=p.user_id, email=p.email, role=p.role)


@router.post("/logout", response_model=dict)
def logout(response: Response):
    response.delete_cookie(settings.jwt_cookie_name, path="/")
    return {"ok": True}
