# ============================================================================
# FILE: album_finder/core/security.py
# Password hashing (bcrypt) and JWT access tokens (python-jose)
# ============================================================================
from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import JWTError, jwt
from album_finder.config import Settings
from album_finder.core.exceptions import UnauthorizedError
from album_finder.schemas.user import TokenData

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72
DEFAULT_BCRYPT_ROUNDS = 10


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash a plaintext password with a fresh salt"""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash"""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class TokenManager:
    """Issues and verifies signed access tokens with one secret and algorithm"""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24 * 7):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenManager":
        return cls(settings.SECRET_KEY, settings.ALGORITHM, settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def create_access_token(self, user, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a signed JWT for a user

        Args:
            user: anything with id, email and username attributes
            expires_delta: lifetime of the token, defaults to expire_minutes

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expire_minutes)

        claims = {
            "sub": str(user.id),
            "id": user.id,
            "email": user.email,
            "username": user.username,
            "iat": now,
            "exp": now + expires_delta,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> TokenData:
        """
        Decode and validate a JWT

        Malformed tokens, bad signatures, expired tokens and payloads without an
        identity all raise the same UnauthorizedError.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise UnauthorizedError("Invalid or expired token")

        user_id = payload.get("id")
        email = payload.get("email")
        username = payload.get("username")
        if not isinstance(user_id, int) or not email or not username:
            raise UnauthorizedError("Invalid or expired token")

        return TokenData(id=user_id, email=email, username=username)
