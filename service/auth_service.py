import logging
from typing import Tuple

from model.usermodels import User, UserRole
from Schema.auth_schema import LoginRequest, RegisterRequest
from service.user_service import UserRepository
from utils.exceptions import DuplicateEmail, InvalidCredentials
from utils.token import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


def identity_claims(user: User) -> dict:
    return {"id": user.id, "email": user.email, "role": UserRole(user.role)}


class AuthService:
    def __init__(self, users: UserRepository, hasher: PasswordHasher, tokens: TokenService):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    def register(self, data: RegisterRequest) -> Tuple[User, str]:
        # friendly early exit; the unique constraint still guards the insert
        if self.users.find_by_email(data.email) is not None:
            logger.info(f"Registration rejected, email already in use: {data.email}")
            raise DuplicateEmail()

        user = self.users.insert(User(
            email=data.email,
            password=self.hasher.hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role or UserRole.employee,
        ))
        logger.info(f"Registered user {user.id} ({user.email}) with role {UserRole(user.role).value}")
        return user, self.tokens.issue(identity_claims(user))

    def login(self, data: LoginRequest) -> Tuple[User, str]:
        user = self.users.find_by_email(data.email)
        # same error for unknown email and wrong password
        if user is None or not self.hasher.verify(data.password, user.password):
            logger.info(f"Failed login attempt for {data.email}")
            raise InvalidCredentials()

        logger.info(f"User {user.id} logged in")
        return user, self.tokens.issue(identity_claims(user))
