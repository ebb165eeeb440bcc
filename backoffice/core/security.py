import re
import html
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from backoffice.core.config import settings

logger = logging.getLogger(__name__)

def sanitize_input(text: Optional[str]) -> Optional[str]:
    """Basic input sanitization to prevent XSS in free-text notes and descriptions."""
    if not isinstance(text, str):
        return text
    # Escape HTML characters
    sanitized = html.escape(text.strip())
    sanitized = re.sub(r'<script.*?>.*?</script>', '', sanitized, flags=re.DOTALL | re.IGNORECASE)
    return sanitized or None

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = dict(data)
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": to_encode.get("type", "access")})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)

def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a bearer token.
    Returns the payload, {"error": "TOKEN_EXPIRED"} for expired tokens, or None when invalid.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return {"error": "TOKEN_EXPIRED"}
    except jwt.PyJWTError as e:
        logger.debug(f"Token decode failed: {e}")
        return None
