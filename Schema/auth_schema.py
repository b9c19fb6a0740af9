from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator
from model.usermodels import UserRole


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    role: Optional[UserRole] = None

    @field_validator('password')
    def validate_password(cls, v):
        # bcrypt only looks at the first 72 bytes
        if len(v.encode('utf-8')) > 72:
            raise ValueError('Password cannot exceed 72 bytes')
        return v

    @field_validator('first_name', 'last_name')
    def validate_name(cls, v):
        if len(v.strip()) < 2:
            raise ValueError('Name must contain at least 2 characters')
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    role: UserRole

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class CurrentUserResponse(BaseModel):
    user: UserResponse
