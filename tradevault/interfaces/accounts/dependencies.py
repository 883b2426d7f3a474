"""
Dependency injection for the accounts bounded context.

Wires the shared collaborators into the account, profile and KYC use
cases. These functions are the composition root for this context.
"""

from typing import Callable

from fastapi import Depends

from tradevault.application.accounts.auth import LoginUseCase, RegisterUseCase
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
from tradevault.domain.accounts.ports import (
    ImageStoragePort,
    PasswordHasher,
    TokenService,
)
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork
from tradevault.interfaces.dependencies import (
    get_image_storage,
    get_notification_queue,
    get_password_hasher,
    get_token_service,
    get_uow_factory,
)


def get_register_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> RegisterUseCase:
    return RegisterUseCase(uow_factory, hasher, tokens, notifications)


def get_login_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> LoginUseCase:
    return LoginUseCase(uow_factory, hasher, tokens)


def get_user_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> GetUserUseCase:
    return GetUserUseCase(uow_factory)


def get_update_profile_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> UpdateProfileUseCase:
    return UpdateProfileUseCase(uow_factory)


def get_list_users_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> ListUsersUseCase:
    return ListUsersUseCase(uow_factory)


def get_admin_update_user_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> AdminUpdateUserUseCase:
    return AdminUpdateUserUseCase(uow_factory)


def get_delete_user_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> DeleteUserUseCase:
    return DeleteUserUseCase(uow_factory)


def get_submit_kyc_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
    storage: ImageStoragePort = Depends(get_image_storage),
) -> SubmitKycUseCase:
    return SubmitKycUseCase(uow_factory, storage)


def get_my_kyc_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> GetMyKycUseCase:
    return GetMyKycUseCase(uow_factory)


def get_list_kyc_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> ListKycUseCase:
    return ListKycUseCase(uow_factory)


def get_review_kyc_use_case(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> ReviewKycUseCase:
    return ReviewKycUseCase(uow_factory, notifications)
