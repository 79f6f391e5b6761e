from fastapi import APIRouter, Depends, status, Response
from typing import Annotated
from app.core.config import Settings
from app.core.dependencies.auth import get_current_operator, get_operator_account
from app.core.dependencies.settings import get_settings
from app.domain.auth.schemas import LoginRequest, LoginResponse, OperatorAccount, OperatorReadDTO
from app.domain.events.schemas import MessageDTO
from app.services.auth_service import login_operator


router = APIRouter(prefix='/api/auth', tags=['auth'])
settings_dependency = Annotated[Settings, Depends(get_settings)]


@router.post("/login", response_model=LoginResponse)
async def login(
        schema: LoginRequest,
        response: Response,
        settings: settings_dependency,
        operator: Annotated[OperatorAccount, Depends(get_operator_account)]
):
    token, user = await login_operator(schema.email, schema.password, operator, settings)
    max_age = settings.access_token_expire_minutes * 60
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/"
    )
    return LoginResponse(user=user, expires_in=max_age)


@router.get("/me", response_model=OperatorReadDTO)
async def me(user: Annotated[OperatorReadDTO, Depends(get_current_operator)]):
    return user


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageDTO)
async def logout(response: Response, settings: settings_dependency):
    response.delete_cookie(key=settings.cookie_name, path="/")
    return MessageDTO(message="Logged out")
