"""
Authentication: password hashing, login and signed session tokens.
"""

import base64
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.config import Settings
from app.exceptions import AuthenticationFailedError, ConflictError, NotFoundError
from domain.models import User
from domain.schemas import RegisterRequest, TokenClaims, parse_form
from repositories import UserRepository

logger = logging.getLogger("kitchen.auth")


def _prehash(plaintext: str) -> bytes:
    # bcrypt only reads 72 bytes; hashing first keeps long passwords distinct
    digest = hashlib.sha256(plaintext.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(plaintext: str, rounds: int = 12) -> str:
    """Salted bcrypt hash; the salt and cost are embedded in the result."""
    return bcrypt.hashpw(_prehash(plaintext), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(plaintext: str, password_hash: str) -> bool:
    """Constant-time check of ``plaintext`` against a stored hash."""
    try:
        return bcrypt.checkpw(_prehash(plaintext), password_hash.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        logger.warning("password_hash_malformed")
        return False


class AuthService:
    """Login, token issuance and account management"""

    def __init__(self, settings: Settings):
        self.settings = settings
        # Checked against when the username is unknown so both failures cost the same
        self._dummy_hash = hash_password("not-a-real-password", rounds=settings.bcrypt_rounds)

    def hash_password(self, plaintext: str) -> str:
        return hash_password(plaintext, rounds=self.settings.bcrypt_rounds)

    def issue_token(self, user: User, now: Optional[datetime] = None) -> str:
        """Signed token naming the user, valid for ``jwt_expiration_hours``."""
        now = now or datetime.now(timezone.utc)
        expires = now + timedelta(hours=self.settings.jwt_expiration_hours)
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
        }
        return jwt.encode(
            claims, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm
        )

    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry.

        Raises:
            AuthenticationFailedError: for any invalid, tampered or expired token
        """
        try:
            payload = jwt.decode(
                token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm]
            )
            return TokenClaims(**payload)
        except ExpiredSignatureError:
            logger.info("token_expired")
            raise AuthenticationFailedError("Session expired, please log in again")
        except (JWTError, ValidationError):
            logger.info("token_invalid")
            raise AuthenticationFailedError("Authentication required")

    def authenticate(self, db: Session, username: str, password: str) -> User:
        """
        Return the active user matching the credentials.

        Raises:
            AuthenticationFailedError: same message whether the username or the
                password was wrong
        """
        user = UserRepository(db).get_by_username((username or "").strip())
        if user is None:
            verify_password(password or "", self._dummy_hash)
            logger.info("login_failed username=%s", username)
            raise AuthenticationFailedError()
        if not verify_password(password or "", user.password_hash):
            logger.info("login_failed username=%s", username)
            raise AuthenticationFailedError()
        logger.info("login_succeeded user_id=%s", user.id)
        return user

    def login(self, db: Session, username: str, password: str) -> str:
        """Authenticate and return a fresh token"""
        return self.issue_token(self.authenticate(db, username, password))

    def register(self, db: Session, **form) -> User:
        """Create an account from the registration form"""
        data = parse_form(RegisterRequest, **form)
        repo = UserRepository(db)
        if repo.get_by_username(data.username, active_only=False) is not None:
            raise ConflictError("Username is already taken")
        if repo.get_by_email(data.email, active_only=False) is not None:
            raise ConflictError("Email is already registered")
        user = repo.create_user(
            username=data.username,
            email=data.email,
            password_hash=self.hash_password(data.password),
        )
        logger.info("user_registered user_id=%s username=%s", user.id, user.username)
        return user

    def get_active_user(self, db: Session, user_id: UUID) -> User:
        user = UserRepository(db).get_by_id(user_id)
        if user is None or not user.is_active:
            raise NotFoundError("User not found")
        return user

    def seed_default_admin(self, db: Session) -> Optional[User]:
        """Create the administrator account if it does not exist yet"""
        repo = UserRepository(db)
        username = self.settings.default_admin_username
        if repo.get_by_username(username, active_only=False) is not None:
            return None
        user = repo.create_user(
            username=username,
            email=self.settings.default_admin_email,
            password_hash=self.hash_password(self.settings.default_admin_password),
        )
        logger.warning(
            "Seeded default admin account '%s' with the configured placeholder "
            "password. Change it before production use.",
            username,
        )
        return user
