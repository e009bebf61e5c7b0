import logging
from datetime import datetime, timedelta
from typing import Optional

import jwt
from fastapi import Header, HTTPException

from admissions import config

logger = logging.getLogger(__name__)


def create_token(sub: str, expires_delta: timedelta = timedelta(days=7)) -> str:
    to_encode = {
        "sub": sub,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + expires_delta,
    }
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALG)


def decode_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])


def current_profile_id(authorization: Optional[str] = Header(default=None)) -> str:
    """Student profile id from the Bearer token's `sub` claim."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1]
    try:
        data = decode_token(token)
    except jwt.PyJWTError as e:
        logger.warning(f"Token decode failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")

    profile_id = data.get("sub")
    if not profile_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return str(profile_id)
