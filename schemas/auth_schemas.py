from pydantic import BaseModel, EmailStr, field_validator
import re


def validate_password_policy(value: str) -> str:
    """
    Password must be at least 8 characters and contain:
    - At least one letter
    - At least one digit
    """
    if len(value) < 8:
        raise ValueError('Password must be at least 8 characters')

    if not re.search(r'[A-Za-z]', value):
        raise ValueError('Password must contain at least one letter')

    if not re.search(r'\d', value):
        raise ValueError('Password must contain at least one digit')

    return value


def _validate_not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError('must not be empty')
    return value


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str


class UserResponse(BaseModel):
    id: str
    email: EmailStr
    full_name: str
    role: str


class AuthResponse(Token):
    user: UserResponse


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return validate_password_policy(value)

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, value):
        return _validate_not_blank(value).strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return _validate_not_blank(value)


class RefreshTokenRequest(BaseModel):
    refresh_token: str

    @field_validator('refresh_token')
    @classmethod
    def validate_token(cls, value):
        if not value or not value.strip():
            raise ValueError('Refresh token cannot be empty')
        return value


class RevokeTokenRequest(RefreshTokenRequest):
    pass


class MessageResponse(BaseModel):
    message: str
