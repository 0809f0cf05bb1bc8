from typing import Optional

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError


class SecurityService:
    """Verifies caller tokens signed by the chat app's auth service with the
    shared ``SECRET_KEY``. Tokens are issued elsewhere."""

    def __init__(self, config):
        self.config = config

    def decode_caller_id(self, token: Optional[str]) -> Optional[str]:
        """Return the ``sub`` claim of a valid token, or None."""
        if not token:
            return None
        try:
            payload = jwt.decode(
                token, self.config.SECRET_KEY, algorithms=[self.config.ALGORITHM]
            )
        except (ExpiredSignatureError, InvalidTokenError):
            return None
        caller_id = payload.get("sub")
        return str(caller_id) if caller_id else None
