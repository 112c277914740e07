"""HTTP route definitions for the account service."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field

from ..domain.account import Account
from ..domain.contracts import RegisterAccountInput
from ..domain.errors import (
    AccountError,
    InvalidCredentials,
    ResetTokenNotFound,
    Unauthorized,
    UserNotFound,
)
from ..domain.service import AccountService

router = APIRouter(prefix="/v1/users", tags=["users"])


class AccountResponse(BaseModel):
    """Serialised, sanitized representation of an `Account`."""

    id: str
    first_name: str
    last_name: str
    email: str
    deleted: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain view."""
        return cls(
            id=account.account_id,
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            deleted=account.deleted,
            created_at=account.created_at,
        )


class RegisterRequest(BaseModel):
    """Payload accepted when registering an account."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    password: str


class LoginRequest(BaseModel):
    """Credentials exchanged for a bearer token."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Bearer token issued after a successful login."""

    token: str


class SendResetPasswordRequest(BaseModel):
    """Address that should receive a password reset link."""

    email: str


class ResetPasswordRequest(BaseModel):
    """Reset token taken from the emailed link plus the new password."""

    guid: str
    password: str


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise Unauthorized()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized()
    return token.strip()


def get_current_account(
    authorization: str | None = Header(default=None),
    service: AccountService = Depends(get_service),
) -> Account:
    """Authenticate the request's bearer token or answer 401."""
    try:
        return service.authenticate(_bearer_token(authorization))
    except Unauthorized as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


@router.post("/register", response_model=AccountResponse)
def register(
    payload: RegisterRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Register an account and return it without credential fields."""
    try:
        account = service.register(
            RegisterAccountInput(
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                password=payload.password,
            )
        )
    except AccountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.code) from exc
    return AccountResponse.from_domain(account)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    service: AccountService = Depends(get_service),
) -> LoginResponse | Response:
    """Exchange email and password for a bearer token."""
    try:
        issued = service.login(payload.email, payload.password)
    except InvalidCredentials:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)
    return LoginResponse(token=issued.token)


@router.post("/send-reset-password")
def send_reset_password(
    payload: SendResetPasswordRequest,
    service: AccountService = Depends(get_service),
) -> Response:
    """Email the reset link for the given address."""
    try:
        service.request_password_reset(payload.email)
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.code) from exc
    return Response(status_code=status.HTTP_200_OK)


@router.post("/reset-password")
def reset_password(
    payload: ResetPasswordRequest,
    service: AccountService = Depends(get_service),
) -> Response:
    """Set a new password using the token from a reset email."""
    try:
        service.reset_password(payload.guid, payload.password)
    except ResetTokenNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.code) from exc
    except AccountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.code) from exc
    return Response(status_code=status.HTTP_200_OK)


@router.get("/current", response_model=AccountResponse)
def current(account: Account = Depends(get_current_account)) -> AccountResponse:
    """Return the account behind the presented bearer token."""
    return AccountResponse.from_domain(account)
