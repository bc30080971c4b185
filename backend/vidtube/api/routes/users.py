"""
VidTube API: User, auth and channel profile routes.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user, get_optional_user
from vidtube.core.config import get_settings
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import (
    ApiResponse,
    ChangePasswordRequest,
    ChannelProfile,
    Empty,
    LoginData,
    LoginRequest,
    RefreshRequest,
    TokenPair,
    UpdateAccountRequest,
    UserOut,
    VideoOut,
)
from vidtube.services.media.storage_service import MediaStorage, get_media_storage
from vidtube.services.users.user_service import user_service

settings = get_settings()
router = APIRouter(prefix="/users", tags=["Users"])


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    options = {"httponly": True, "secure": settings.cookie_secure, "samesite": "lax"}
    response.set_cookie("accessToken", access_token, **options)
    response.set_cookie("refreshToken", refresh_token, **options)


@router.post("/register", response_model=ApiResponse[UserOut], status_code=201)
async def register(
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """Create an account; an avatar image is mandatory, a cover image optional."""
    user = await user_service.register(
        db, storage, full_name, email, username, password, avatar, cover_image
    )
    return ApiResponse.ok(UserOut.model_validate(user), "User registered successfully", 201)


@router.post("/login", response_model=ApiResponse[LoginData])
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user, access_token, refresh_token = await user_service.login(
        db, data.password, username=data.username, email=data.email
    )
    _set_auth_cookies(response, access_token, refresh_token)
    return ApiResponse.ok(
        LoginData(user=UserOut.model_validate(user), access_token=access_token, refresh_token=refresh_token),
        "User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[Empty])
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.logout(db, user)
    response.delete_cookie("accessToken")
    response.delete_cookie("refreshToken")
    return ApiResponse.ok(Empty(), "User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
async def refresh_access_token(
    request: Request,
    response: Response,
    data: Optional[RefreshRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
):
    """Rotate the credential pair using the refresh token (cookie or body)."""
    incoming = request.cookies.get("refreshToken") or (data.refresh_token if data else None)
    access_token, refresh_token = await user_service.refresh(db, incoming)
    _set_auth_cookies(response, access_token, refresh_token)
    return ApiResponse.ok(
        TokenPair(access_token=access_token, refresh_token=refresh_token),
        "Access token refreshed successfully",
    )


@router.post("/change-password", response_model=ApiResponse[Empty])
async def change_password(
    data: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(db, user, data.old_password, data.new_password)
    return ApiResponse.ok(Empty(), "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserOut])
async def current_user(user: User = Depends(get_current_user)):
    return ApiResponse.ok(UserOut.model_validate(user), "Current user fetched successfully")


@router.patch("/update-account", response_model=ApiResponse[UserOut])
async def update_account(
    data: UpdateAccountRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_account(db, user, data.full_name, data.email)
    return ApiResponse.ok(UserOut.model_validate(user), "Account details updated successfully")


@router.patch("/update-avatar", response_model=ApiResponse[UserOut])
async def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    user = await user_service.update_avatar(db, storage, user, avatar)
    return ApiResponse.ok(UserOut.model_validate(user), "Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserOut])
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    user = await user_service.update_cover_image(db, storage, user, cover_image)
    return ApiResponse.ok(UserOut.model_validate(user), "Cover image updated successfully")


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfile])
async def channel_profile(
    username: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await user_service.get_channel_profile(db, username, viewer)
    return ApiResponse.ok(ChannelProfile(**profile), "Channel profile fetched successfully")


@router.get("/history", response_model=ApiResponse[List[VideoOut]])
async def watch_history(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await user_service.get_watch_history(db, user)
    return ApiResponse.ok(
        [VideoOut.model_validate(v) for v in videos], "Watch history fetched successfully"
    )
