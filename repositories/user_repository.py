"""
User Repository - Data access layer for user accounts
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import User


class UserRepository(BaseRepository[User]):
    """Repository for user data access"""

    conflict_message = "Username or email is already registered"

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_username(self, username: str, active_only: bool = True) -> Optional[User]:
        """Get user by username"""
        stmt = select(User).where(User.username == username)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        return self.db.scalars(stmt).first()

    def get_by_email(self, email: str, active_only: bool = True) -> Optional[User]:
        """Get user by email"""
        stmt = select(User).where(User.email == email)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        return self.db.scalars(stmt).first()

    def create_user(self, username: str, email: str, password_hash: str) -> User:
        """Create a new user; duplicate username or email raises ConflictError"""
        user = User(username=username, email=email, password_hash=password_hash)
        return self.create(user)
