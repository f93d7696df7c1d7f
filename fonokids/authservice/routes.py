from __future__ import annotations
from fastapi import APIRouter, Depends, status
from .contracts import (
    LoginRequest, CreateAccountRequest, ForgotPasswordRequest, VerifyCodeRequest, ResetPasswordRequest,
    LoginResult, CreateAccountResult, ForgotPasswordResult, VerifyCodeResult, ResetPasswordResult, ProfileResult,
    TokenClaims,
)
from .deps import get_auth_service, require_claims
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=LoginResult)
def login(req: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    return svc.login(req)

@router.post("/forgot-password", response_model=ForgotPasswordResult)
def forgot_password(req: ForgotPasswordRequest, svc: AuthService = Depends(get_auth_service)):
    return svc.forgot_password(req)

@router.post("/verify-reset-code", response_model=VerifyCodeResult)
def verify_reset_code(req: VerifyCodeRequest, svc: AuthService = Depends(get_auth_service)):
    return svc.verify_code(req)

@router.post("/reset-password", response_model=ResetPasswordResult)
def reset_password(req: ResetPasswordRequest, svc: AuthService = Depends(get_auth_service)):
    return svc.reset_password(req)

@router.post("/create-user", response_model=CreateAccountResult, status_code=status.HTTP_201_CREATED)
def create_user(req: CreateAccountRequest, svc: AuthService = Depends(get_auth_service)):
    return svc.create_account(req)

@router.get("/profile", response_model=ProfileResult)
def profile(claims: TokenClaims = Depends(require_claims), svc: AuthService = Depends(get_auth_service)):
    return svc.get_profile(claims)
