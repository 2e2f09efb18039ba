from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_current_user_optional
from app.core.config import settings
from app.core.database import get_db
from app.core.stream import ChatProvider, get_chat_provider
from app.models.user import User as UserModel
from app.schemas.auth import LoginRequest, SignupRequest, TokenPair
from app.schemas.response import ApiResponse, ok
from app.schemas.user import OnboardingRequest, User
from app.services.auth import AuthService
from app.services.user import UserService

router = APIRouter()


def set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    response.set_cookie(
        key=settings.ACCESS_TOKEN_COOKIE_NAME,
        value=tokens.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )
    response.set_cookie(
        key=settings.REFRESH_TOKEN_COOKIE_NAME,
        value=tokens.refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (settings.ACCESS_TOKEN_COOKIE_NAME, settings.REFRESH_TOKEN_COOKIE_NAME):
        response.delete_cookie(
            key=name,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="strict",
        )


@router.post("/signup", response_model=ApiResponse[User], status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: SignupRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    chat_provider: ChatProvider = Depends(get_chat_provider)
):
    """Register a new user and start a session"""
    auth_service = AuthService(db, chat_provider)
    user, tokens = await auth_service.signup(signup_data)
    set_auth_cookies(response, tokens)
    return ok(User.model_validate(user), "User created successfully", status.HTTP_201_CREATED)


@router.post("/login", response_model=ApiResponse[User])
async def login(
    login_data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password"""
    auth_service = AuthService(db)
    user, tokens = await auth_service.login(login_data)
    set_auth_cookies(response, tokens)
    return ok(User.model_validate(user), "Logged in successfully")


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    response: Response,
    current_user: Optional[UserModel] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db)
):
    """End the session and clear auth cookies"""
    await AuthService(db).logout(current_user)
    clear_auth_cookies(response)
    return ok(None, "Logged out successfully")


@router.post("/onboarding", response_model=ApiResponse[User])
async def onboarding(
    onboarding_data: OnboardingRequest,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    chat_provider: ChatProvider = Depends(get_chat_provider)
):
    """Complete the profile and unlock social features"""
    service = UserService(db, chat_provider)
    user = await service.complete_onboarding(current_user.id, onboarding_data)
    return ok(User.model_validate(user), "User onboarded successfully")


@router.get("/is-logged-in", response_model=ApiResponse[User])
async def is_logged_in(
    current_user: UserModel = Depends(get_current_user)
):
    """Check whether the request carries a valid session"""
    return ok(User.model_validate(current_user), "User is logged in")
