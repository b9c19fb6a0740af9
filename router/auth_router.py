from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from container import Container, get_container
from db.database import get_db
from Schema.auth_schema import AuthResponse, CurrentUserResponse, LoginRequest, RegisterRequest, UserResponse
from service.auth_service import AuthService
from service.user_service import UserRepository
from utils.auth_utils import Identity, get_current_user


router = APIRouter(prefix="/api/auth")


def get_auth_service(db: Session = Depends(get_db), container: Container = Depends(get_container)) -> AuthService:
    return AuthService(UserRepository(db), container.password_hasher, container.token_service)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Create an account and return a token for it"""
    user, token = auth_service.register(data)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    user, token = auth_service.login(data)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=CurrentUserResponse)
def me(identity: Identity = Depends(get_current_user)):
    """Return the caller as currently stored"""
    return CurrentUserResponse(user=UserResponse.model_validate(identity))
