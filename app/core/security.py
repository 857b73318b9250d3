"""
Security utilities.

Verifies the signed identity tokens presented by callers (python-jose) and
hashes account passwords with bcrypt. Token issuance lives with the login
service, not here.
"""
import logging
from typing import Any, Dict

import bcrypt
from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)

# Matches the cost factor accounts were created with
BCRYPT_ROUNDS = 12


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a signed identity token.

    Args:
        token: Compact JWT string taken from the Authorization header or cookie.

    Returns:
        The decoded claims.

    Raises:
        ValueError: If the signature is wrong, the token expired or it cannot
            be decoded at all.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        logger.debug("Token verification failed: %s", exc)
        raise ValueError("Invalid or expired token") from exc
