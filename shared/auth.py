from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header, HTTPException
from jose import JWTError, jwt

from .config import AUTH_SECRET, ACCESS_TTL_SECONDS, ALGO, ISSUER


def _encode(payload: dict, ttl: int) -> str:
    now = datetime.now(timezone.utc)
    body = {
        "iss": ISSUER,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl)).timestamp()),
        **payload
    }
    return jwt.encode(body, AUTH_SECRET, algorithm=ALGO)


def issue_access(user_id: str) -> str:
    return _encode({"sub": str(user_id), "scope": "access"}, ACCESS_TTL_SECONDS)


def decode_token(token: str) -> dict:
    return jwt.decode(token, AUTH_SECRET, algorithms=[ALGO], issuer=ISSUER)


# Caller identity for protected routes; sessions are issued elsewhere.
def current_user(authorization: Optional[str] = Header(None)) -> dict:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    token = authorization.split(" ", 1)[1]
    try:
        claims = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if claims.get("scope") != "access":
        raise HTTPException(status_code=401, detail="Access token required")
    return {"id": claims["sub"]}
