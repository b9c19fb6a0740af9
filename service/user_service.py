from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from model.usermodels import User
from utils.exceptions import DuplicateEmail


class UserRepository:
    """Credential store over the users table."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def insert(self, user: User) -> User:
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # unique constraint on email is the real guarantee, the caller's pre-check can race
            self.db.rollback()
            raise DuplicateEmail()
        self.db.refresh(user)
        return user
