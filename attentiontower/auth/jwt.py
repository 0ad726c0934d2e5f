"""Bearer tokens identifying the owner of a tower.

Tokens are HS256 JWTs whose `sub` claim is the user id. Signing settings come
from the environment.
"""

import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict
from dotenv import load_dotenv

load_dotenv()

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))


def create_access_token(user_id: str, expires_in: Optional[timedelta] = None) -> str:
    """Sign a token for a user.

    Args:
        user_id: Owner id placed in the `sub` claim
        expires_in: Lifetime (defaults to JWT_EXPIRATION_HOURS)
    """
    issued_at = datetime.utcnow()
    lifetime = expires_in if expires_in is not None else timedelta(hours=JWT_EXPIRATION_HOURS)
    claims = {"sub": user_id, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Verified claims of a token, or None if it is malformed, forged or expired."""
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def get_user_id_from_token(token: str) -> Optional[str]:
    claims = decode_access_token(token) or {}
    return claims.get("sub")
