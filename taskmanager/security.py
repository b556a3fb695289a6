from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from .errors import TokenExpired, TokenInvalid

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt directly."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(_password_bytes(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password: Optional[str], hashed_password: Optional[str]) -> bool:
        """Verify a password against its hash."""
        if not password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(_password_bytes(password), hashed_password.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt digest.
            return False


class TokenIssuer:
    """Signs and verifies short-lived bearer tokens carrying a user id."""

    def __init__(self, secret: str, expires_in: timedelta, algorithm: str = "HS256"):
        self.secret = secret
        self.expires_in = expires_in
        self.algorithm = algorithm

    def mint(self, user_id: str) -> str:
        """Create a JWT access token."""
        expire = datetime.now(timezone.utc) + self.expires_in
        return jwt.encode({"sub": str(user_id), "exp": expire}, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpired("Token has expired.")
        except JWTError:
            raise TokenInvalid("Token is invalid.")

        user_id = payload.get("sub")
        if not user_id:
            raise TokenInvalid("Token is invalid.")
        return user_id
