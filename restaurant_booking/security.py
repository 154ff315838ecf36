import time
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException

from .config import settings
from .models import ROLE_ADMIN, ROLE_USER


@dataclass
class Principal:
    id: int
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def create_access_token(user_id: int, role: str = ROLE_USER, ttl_minutes: int = 480) -> str:
    # tokens are normally issued by the auth service; used by tooling and tests
    now = int(time.time())
    payload = {"sub": str(user_id), "role": role, "iat": now, "exp": now + ttl_minutes * 60}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Principal:
    try:
        data = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return Principal(id=int(data["sub"]), role=data.get("role", ROLE_USER))
    except (jwt.PyJWTError, KeyError, ValueError):
        raise HTTPException(401, "Not authorized, token failed")


def get_current_principal(authorization: Optional[str] = Header(None)) -> Principal:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(401, "Not authorized, no token")
    return decode_token(authorization[len("Bearer "):].strip())


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(403, "Not authorized as an admin")
    return principal
