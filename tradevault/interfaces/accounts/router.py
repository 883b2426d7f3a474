"""
FastAPI router for the accounts bounded context.

Covers authentication, profiles, admin user management and KYC.
All routes delegate to use cases. No business logic here.
Error mapping is handled by centralized error handlers.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status

from tradevault.application.accounts.auth import LoginUseCase, RegisterUseCase
from tradevault.application.accounts.dtos import (
    AdminUserChanges,
    ProfileChanges,
    RegisterCommand,
    SubmitKycCommand,
)
from tradevault.application.accounts.kyc import (
    GetMyKycUseCase,
    ListKycUseCase,
    ReviewKycUseCase,
    SubmitKycUseCase,
)
from tradevault.application.accounts.users import (
    AdminUpdateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    UpdateProfileUseCase,
)
from tradevault.core.config import settings
from tradevault.domain.accounts.entities import Principal
from tradevault.interfaces.accounts.dependencies import (
    get_admin_update_user_use_case,
    get_delete_user_use_case,
    get_list_kyc_use_case,
    get_list_users_use_case,
    get_login_use_case,
    get_my_kyc_use_case,
    get_register_use_case,
    get_review_kyc_use_case,
    get_submit_kyc_use_case,
    get_update_profile_use_case,
    get_user_use_case,
)
from tradevault.interfaces.accounts.schemas import (
    AdminUpdateUserRequest,
    AuthResponse,
    KycResponse,
    LoginRequest,
    RegisterRequest,
    SubmitKycRequest,
    UpdateProfileRequest,
    UserListResponse,
    UserResponse,
)
from tradevault.interfaces.dependencies import get_current_principal, require_admin
from tradevault.interfaces.schemas import ErrorResponse, StatusUpdateRequest
from tradevault.shared.security.rate_limiting import address_key, limiter

router = APIRouter()


# ── Auth ─────────────────────────────────────────────────────────


@router.post(
    "/auth/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["auth"],
    summary="Register a new account",
)
@limiter.limit(settings.rate_limit_auth, key_func=address_key)
def register(
    request: Request,
    body: RegisterRequest,
    use_case: RegisterUseCase = Depends(get_register_use_case),
) -> AuthResponse:
    result = use_case.execute(
        RegisterCommand(
            full_name=body.full_name,
            email=body.email,
            password=body.password,
            country=body.country,
            phone=body.phone,
        )
    )
    return AuthResponse.model_validate(result)


@router.post(
    "/auth/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
    tags=["auth"],
    summary="Exchange credentials for a bearer token",
)
@limiter.limit(settings.rate_limit_auth, key_func=address_key)
def login(
    request: Request,
    body: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
) -> AuthResponse:
    return AuthResponse.model_validate(use_case.execute(body.email, body.password))


# ── Users ────────────────────────────────────────────────────────


@router.get("/users/me", response_model=UserResponse, tags=["users"])
def get_me(
    principal: Principal = Depends(get_current_principal),
    use_case: GetUserUseCase = Depends(get_user_use_case),
) -> UserResponse:
    return UserResponse.model_validate(use_case.execute(principal, principal.user_id))


@router.patch("/users/me", response_model=UserResponse, tags=["users"])
def update_me(
    body: UpdateProfileRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
) -> UserResponse:
    view = use_case.execute(principal.user_id, ProfileChanges(**body.model_dump()))
    return UserResponse.model_validate(view)


@router.get(
    "/users",
    response_model=UserListResponse,
    tags=["users"],
    summary="List users (admin)",
)
def list_users(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    _admin: Principal = Depends(require_admin),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
) -> UserListResponse:
    users, total = use_case.execute(limit=limit, offset=offset)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["users"],
)
def get_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    use_case: GetUserUseCase = Depends(get_user_use_case),
) -> UserResponse:
    return UserResponse.model_validate(use_case.execute(principal, user_id))


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    tags=["users"],
    summary="Change a user's role or status (admin)",
)
def admin_update_user(
    user_id: str,
    body: AdminUpdateUserRequest,
    admin: Principal = Depends(require_admin),
    use_case: AdminUpdateUserUseCase = Depends(get_admin_update_user_use_case),
) -> UserResponse:
    view = use_case.execute(
        admin, user_id, AdminUserChanges(is_admin=body.is_admin, status=body.status)
    )
    return UserResponse.model_validate(view)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["users"],
    summary="Delete a user (admin)",
)
def delete_user(
    user_id: str,
    admin: Principal = Depends(require_admin),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
) -> Response:
    use_case.execute(admin, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── KYC ──────────────────────────────────────────────────────────


@router.post(
    "/kyc",
    response_model=KycResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    tags=["kyc"],
    summary="Submit identity documents",
)
def submit_kyc(
    body: SubmitKycRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: SubmitKycUseCase = Depends(get_submit_kyc_use_case),
) -> KycResponse:
    record = use_case.execute(
        SubmitKycCommand(user_id=principal.user_id, **body.model_dump())
    )
    return KycResponse.model_validate(record)


@router.get("/kyc/me", response_model=KycResponse, tags=["kyc"])
def get_my_kyc(
    principal: Principal = Depends(get_current_principal),
    use_case: GetMyKycUseCase = Depends(get_my_kyc_use_case),
) -> KycResponse:
    return KycResponse.model_validate(use_case.execute(principal.user_id))


@router.get("/kyc", response_model=list[KycResponse], tags=["kyc"])
def list_kyc(
    kyc_status: str | None = Query(default=None, alias="status"),
    _admin: Principal = Depends(require_admin),
    use_case: ListKycUseCase = Depends(get_list_kyc_use_case),
) -> list[KycResponse]:
    return [KycResponse.model_validate(r) for r in use_case.execute(kyc_status)]


@router.put(
    "/kyc/{kyc_id}/status",
    response_model=KycResponse,
    responses={409: {"model": ErrorResponse}},
    tags=["kyc"],
    summary="Approve or reject a KYC submission (admin)",
)
def review_kyc(
    kyc_id: str,
    body: StatusUpdateRequest,
    _admin: Principal = Depends(require_admin),
    use_case: ReviewKycUseCase = Depends(get_review_kyc_use_case),
) -> KycResponse:
    return KycResponse.model_validate(use_case.execute(kyc_id, body.status))
