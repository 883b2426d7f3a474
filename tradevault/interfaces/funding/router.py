"""
FastAPI router for the funding bounded context.

Users create deposits, fiat funding requests, withdrawals and loan
applications. Admins move them through their status machines; approvals
credit the wallet and failed withdrawals refund it.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from tradevault.application.funding.deposits import (
    CreateDepositUseCase,
    DeleteDepositUseCase,
    GetUserDepositsUseCase,
    ListDepositsUseCase,
    UpdateDepositStatusUseCase,
)
from tradevault.application.funding.dtos import (
    CreateDepositCommand,
    CreateLoanCommand,
    CreateWithdrawalCommand,
    SubmitFundingRequestCommand,
)
from tradevault.application.funding.funding_requests import (
    ListFundingRequestsUseCase,
    ReviewFundingRequestUseCase,
    SubmitFundingRequestUseCase,
)
from tradevault.application.funding.loans import (
    CreateLoanUseCase,
    DeleteLoanUseCase,
    GetUserLoansUseCase,
    ListLoansUseCase,
    UpdateLoanStatusUseCase,
)
from tradevault.application.funding.withdrawals import (
    CreateWithdrawalUseCase,
    GetUserWithdrawalsUseCase,
    ListWithdrawalsUseCase,
    UpdateWithdrawalStatusUseCase,
)
from tradevault.domain.accounts.entities import Principal
from tradevault.interfaces.dependencies import get_current_principal, require_admin
from tradevault.interfaces.funding.dependencies import (
    get_create_deposit_use_case,
    get_create_loan_use_case,
    get_create_withdrawal_use_case,
    get_delete_deposit_use_case,
    get_delete_loan_use_case,
    get_list_deposits_use_case,
    get_list_funding_requests_use_case,
    get_list_loans_use_case,
    get_list_withdrawals_use_case,
    get_review_funding_request_use_case,
    get_submit_funding_request_use_case,
    get_update_deposit_status_use_case,
    get_update_loan_status_use_case,
    get_update_withdrawal_status_use_case,
    get_user_deposits_use_case,
    get_user_loans_use_case,
    get_user_withdrawals_use_case,
)
from tradevault.interfaces.funding.schemas import (
    CreateDepositRequest,
    CreateLoanRequest,
    CreateWithdrawalRequest,
    DepositResponse,
    FundingRequestResponse,
    LoanResponse,
    SubmitFundingRequest,
    UserDepositsResponse,
    WithdrawalResponse,
    WithdrawalStatusRequest,
)
from tradevault.interfaces.schemas import ErrorResponse, StatusUpdateRequest

router = APIRouter()

STATUS_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ── Deposits ─────────────────────────────────────────────────────


@router.post(
    "/deposits",
    response_model=DepositResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["deposits"],
)
def create_deposit(
    body: CreateDepositRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: CreateDepositUseCase = Depends(get_create_deposit_use_case),
) -> DepositResponse:
    deposit = use_case.execute(
        CreateDepositCommand(user_id=principal.user_id, **body.model_dump())
    )
    return DepositResponse.model_validate(deposit)


@router.get("/deposits/me", response_model=UserDepositsResponse, tags=["deposits"])
def my_deposits(
    principal: Principal = Depends(get_current_principal),
    use_case: GetUserDepositsUseCase = Depends(get_user_deposits_use_case),
) -> UserDepositsResponse:
    return UserDepositsResponse.model_validate(use_case.execute(principal.user_id))


@router.get(
    "/deposits",
    response_model=list[DepositResponse],
    tags=["deposits"],
    summary="List deposits (admin)",
)
def list_deposits(
    deposit_status: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _admin: Principal = Depends(require_admin),
    use_case: ListDepositsUseCase = Depends(get_list_deposits_use_case),
) -> list[DepositResponse]:
    deposits = use_case.execute(deposit_status, limit=limit, offset=offset)
    return [DepositResponse.model_validate(d) for d in deposits]


@router.put(
    "/deposits/{deposit_id}/status",
    response_model=DepositResponse,
    responses=STATUS_ERRORS,
    tags=["deposits"],
    summary="Approve or reject a deposit (admin)",
    description="Approval credits the wallet exactly once.",
)
def update_deposit_status(
    deposit_id: str,
    body: StatusUpdateRequest,
    _admin: Principal = Depends(require_admin),
    use_case: UpdateDepositStatusUseCase = Depends(get_update_deposit_status_use_case),
) -> DepositResponse:
    return DepositResponse.model_validate(use_case.execute(deposit_id, body.status))


@router.delete(
    "/deposits/{deposit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["deposits"],
    summary="Delete a deposit that was never credited (admin)",
)
def delete_deposit(
    deposit_id: str,
    _admin: Principal = Depends(require_admin),
    use_case: DeleteDepositUseCase = Depends(get_delete_deposit_use_case),
) -> Response:
    use_case.execute(deposit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Fiat funding requests ────────────────────────────────────────


@router.post(
    "/funding/requests",
    response_model=FundingRequestResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["funding"],
)
def submit_funding_request(
    body: SubmitFundingRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: SubmitFundingRequestUseCase = Depends(get_submit_funding_request_use_case),
) -> FundingRequestResponse:
    request = use_case.execute(
        SubmitFundingRequestCommand(
            user_id=principal.user_id,
            currency=body.currency,
            amount=body.amount,
            transaction_type=body.transaction_type,
            name=body.name,
            email=body.email,
            image_urls=tuple(body.image_urls),
        )
    )
    return FundingRequestResponse.model_validate(request)


@router.get(
    "/funding/requests/me", response_model=list[FundingRequestResponse], tags=["funding"]
)
def my_funding_requests(
    principal: Principal = Depends(get_current_principal),
    use_case: ListFundingRequestsUseCase = Depends(get_list_funding_requests_use_case),
) -> list[FundingRequestResponse]:
    return [
        FundingRequestResponse.model_validate(r)
        for r in use_case.for_user(principal.user_id)
    ]


@router.get(
    "/funding/requests",
    response_model=list[FundingRequestResponse],
    tags=["funding"],
    summary="List funding requests (admin)",
    description="Filter with `status=pending` for the review queue.",
)
def list_funding_requests(
    request_status: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _admin: Principal = Depends(require_admin),
    use_case: ListFundingRequestsUseCase = Depends(get_list_funding_requests_use_case),
) -> list[FundingRequestResponse]:
    requests = use_case.all(request_status, limit=limit, offset=offset)
    return [FundingRequestResponse.model_validate(r) for r in requests]


@router.post(
    "/funding/requests/{request_id}/approve",
    response_model=FundingRequestResponse,
    responses=STATUS_ERRORS,
    tags=["funding"],
    summary="Approve a funding request (admin)",
    description="Credits the declared amount to the wallet exactly once.",
)
def approve_funding_request(
    request_id: str,
    _admin: Principal = Depends(require_admin),
    use_case: ReviewFundingRequestUseCase = Depends(get_review_funding_request_use_case),
) -> FundingRequestResponse:
    return FundingRequestResponse.model_validate(use_case.approve(request_id))


@router.post(
    "/funding/requests/{request_id}/reject",
    response_model=FundingRequestResponse,
    responses=STATUS_ERRORS,
    tags=["funding"],
    summary="Reject a funding request (admin)",
)
def reject_funding_request(
    request_id: str,
    _admin: Principal = Depends(require_admin),
    use_case: ReviewFundingRequestUseCase = Depends(get_review_funding_request_use_case),
) -> FundingRequestResponse:
    return FundingRequestResponse.model_validate(use_case.reject(request_id))


# ── Withdrawals ──────────────────────────────────────────────────


@router.post(
    "/withdrawals",
    response_model=WithdrawalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    tags=["withdrawals"],
    summary="Request a payout",
    description="Reserves the amount from the wallet immediately.",
)
def create_withdrawal(
    body: CreateWithdrawalRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: CreateWithdrawalUseCase = Depends(get_create_withdrawal_use_case),
) -> WithdrawalResponse:
    withdrawal = use_case.execute(
        CreateWithdrawalCommand(user_id=principal.user_id, **body.model_dump())
    )
    return WithdrawalResponse.model_validate(withdrawal)


@router.get(
    "/withdrawals/me", response_model=list[WithdrawalResponse], tags=["withdrawals"]
)
def my_withdrawals(
    principal: Principal = Depends(get_current_principal),
    use_case: GetUserWithdrawalsUseCase = Depends(get_user_withdrawals_use_case),
) -> list[WithdrawalResponse]:
    return [
        WithdrawalResponse.model_validate(w)
        for w in use_case.execute(principal.user_id)
    ]


@router.get(
    "/withdrawals",
    response_model=list[WithdrawalResponse],
    tags=["withdrawals"],
    summary="List withdrawals (admin)",
)
def list_withdrawals(
    withdrawal_status: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _admin: Principal = Depends(require_admin),
    use_case: ListWithdrawalsUseCase = Depends(get_list_withdrawals_use_case),
) -> list[WithdrawalResponse]:
    withdrawals = use_case.execute(withdrawal_status, limit=limit, offset=offset)
    return [WithdrawalResponse.model_validate(w) for w in withdrawals]


@router.put(
    "/withdrawals/{withdrawal_id}/status",
    response_model=WithdrawalResponse,
    responses=STATUS_ERRORS,
    tags=["withdrawals"],
    summary="Process, approve or fail a withdrawal (admin)",
    description="Failing a withdrawal refunds the reserved amount exactly once.",
)
def update_withdrawal_status(
    withdrawal_id: str,
    body: WithdrawalStatusRequest,
    _admin: Principal = Depends(require_admin),
    use_case: UpdateWithdrawalStatusUseCase = Depends(
        get_update_withdrawal_status_use_case
    ),
) -> WithdrawalResponse:
    withdrawal = use_case.execute(withdrawal_id, body.status, tx_hash=body.tx_hash)
    return WithdrawalResponse.model_validate(withdrawal)


# ── Loans ────────────────────────────────────────────────────────


@router.post(
    "/loans",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["loans"],
)
def create_loan(
    body: CreateLoanRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: CreateLoanUseCase = Depends(get_create_loan_use_case),
) -> LoanResponse:
    loan = use_case.execute(
        CreateLoanCommand(user_id=principal.user_id, **body.model_dump())
    )
    return LoanResponse.model_validate(loan)


@router.get("/loans/me", response_model=list[LoanResponse], tags=["loans"])
def my_loans(
    principal: Principal = Depends(get_current_principal),
    use_case: GetUserLoansUseCase = Depends(get_user_loans_use_case),
) -> list[LoanResponse]:
    return [LoanResponse.model_validate(loan) for loan in use_case.execute(principal.user_id)]


@router.get(
    "/loans",
    response_model=list[LoanResponse],
    tags=["loans"],
    summary="List loan applications (admin)",
)
def list_loans(
    loan_status: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _admin: Principal = Depends(require_admin),
    use_case: ListLoansUseCase = Depends(get_list_loans_use_case),
) -> list[LoanResponse]:
    loans = use_case.execute(loan_status, limit=limit, offset=offset)
    return [LoanResponse.model_validate(loan) for loan in loans]


@router.put(
    "/loans/{loan_id}/status",
    response_model=LoanResponse,
    responses=STATUS_ERRORS,
    tags=["loans"],
    summary="Approve or reject a loan (admin)",
)
def update_loan_status(
    loan_id: str,
    body: StatusUpdateRequest,
    _admin: Principal = Depends(require_admin),
    use_case: UpdateLoanStatusUseCase = Depends(get_update_loan_status_use_case),
) -> LoanResponse:
    return LoanResponse.model_validate(use_case.execute(loan_id, body.status))


@router.delete(
    "/loans/{loan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["loans"],
    summary="Delete a loan application that was never approved (admin)",
)
def delete_loan(
    loan_id: str,
    _admin: Principal = Depends(require_admin),
    use_case: DeleteLoanUseCase = Depends(get_delete_loan_use_case),
) -> Response:
    use_case.execute(loan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
