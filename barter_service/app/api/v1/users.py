from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from common.models.user import UserRegisterInput

from ..schemas.common import MessageResponse
from ..schemas.users import (
    ListUsersResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from ...services.account_service import AccountService, get_account_service
from ...services.user_directory import UserDirectory, get_user_directory

router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
)
async def register(
    body: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    input_model = UserRegisterInput(**body.model_dump(exclude={"password"}))
    user = service.register(input_model)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "email_taken", "message": "Email already registered"},
        )
    return UserResponse.from_domain(user)


@router.post("/login", response_model=UserResponse, summary="로그인")
async def login(
    body: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    user = service.login(body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "invalid_credentials", "message": "Invalid email or password"},
        )
    return UserResponse.from_domain(user)


@router.post("/logout", response_model=MessageResponse, summary="로그아웃")
async def logout(
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    service.logout()
    return MessageResponse(message="logged_out")


@router.get("/me", response_model=UserResponse, summary="현재 세션 유저 조회")
async def get_current_user(
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    user = service.current_user
    if user is None:
        raise HTTPException(status_code=401, detail="not logged in")
    return UserResponse.from_domain(user)


@router.get("/{user_id}", response_model=UserResponse, summary="유저 프로필 조회")
async def get_user(
    user_id: str,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    user = directory.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="user not found")
    return UserResponse.from_domain(user)


@router.get("", response_model=ListUsersResponse, summary="유저 목록 조회")
async def list_users(
    directory: UserDirectory = Depends(get_user_directory),
) -> ListUsersResponse:
    users = directory.get_all()
    return ListUsersResponse(
        total=len(users),
        items=[UserResponse.from_domain(u) for u in users],
    )
