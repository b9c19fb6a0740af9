import logging
from dataclasses import dataclass
from typing import Collection, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from container import Container, get_container
from db.database import get_db
from model.usermodels import User, UserRole
from service.user_service import UserRepository
from utils.exceptions import Forbidden, InvalidToken, Unauthorized
from utils.token import TokenService

logger = logging.getLogger(__name__)

ADMIN_ONLY = frozenset({UserRole.admin})


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, rebuilt from the database on every request."""

    id: int
    email: str
    role: UserRole
    first_name: str
    last_name: str

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            id=user.id,
            email=user.email,
            role=UserRole(user.role),
            first_name=user.first_name,
            last_name=user.last_name,
        )


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthorized("Access denied. No token provided.")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Access denied. No token provided.")
    return token.strip()


def authenticate(token: str, tokens: TokenService, users: UserRepository) -> Identity:
    """Resolve a token to the current user.

    The role comes from the database, not from the token, so a demoted
    admin loses access as soon as the row changes.
    """
    try:
        payload = tokens.verify(token)
    except InvalidToken:
        raise Unauthorized("Invalid token.")

    user = users.find_by_id(payload["id"])
    if user is None:
        logger.info(f"Token subject {payload['id']} no longer exists")
        raise Unauthorized("Invalid token.")
    return Identity.from_user(user)


def authorize(identity: Identity, allowed_roles: Collection[UserRole]) -> None:
    if identity.role not in allowed_roles:
        raise Forbidden()


# FastAPI dependencies
def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    container: Container = Depends(get_container),
) -> Identity:
    token = extract_bearer_token(authorization)
    return authenticate(token, container.token_service, UserRepository(db))


def require_role(allowed_roles: Collection[UserRole]):
    def _require_role(identity: Identity = Depends(get_current_user)) -> Identity:
        authorize(identity, allowed_roles)
        return identity
    return _require_role
