import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from utils.exceptions import InvalidToken

logger = logging.getLogger(__name__)

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_expiry(value: str) -> timedelta:
    """Parse an expiry such as ``7d``, ``12h``, ``30m``, ``45s`` or bare seconds."""
    match = _DURATION_PATTERN.match(str(value).lower())
    if not match:
        raise ValueError(f"Invalid token expiry: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class TokenService:
    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_in: str = "7d"):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = parse_expiry(expires_in)

    def issue(self, identity: Mapping[str, Any]) -> str:
        """Sign a token carrying the user's id, email and role."""
        role = identity["role"]
        now = datetime.now(timezone.utc)
        payload = {
            "id": int(identity["id"]),
            "email": identity["email"],
            "role": getattr(role, "value", role),
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.info("JWT token has expired")
            raise InvalidToken("Token has expired")
        except JWTError as e:
            logger.info(f"Invalid JWT token: {str(e)}")
            raise InvalidToken("Invalid token")

        user_id = payload.get("id")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise InvalidToken("Malformed token payload")
        return payload


class PasswordHasher:
    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        hashed_password = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))
        return hashed_password.decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            # malformed stored hash or an over-long password
            return False
