from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Literal


class OperatorAccount(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    password_hash: str


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    email: EmailStr
    password: str = Field(min_length=1)


class OperatorReadDTO(BaseModel):
    email: str
    role: Literal["admin"] = "admin"


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: OperatorReadDTO
    expires_in: int = Field(description='Expiration time in seconds')


class TokenPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sub: str
    iat: int
    nbf: int
    exp: int
    jti: str | None = None
    typ: Literal["access"] | None = None
    iss: str | None = None
    aud: str | list[str] | None = None
