from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidResetCode
from app.db.database import get_db
from app.schemas.password_reset import (
    ResetCodeRequest,
    VerifyResetCodeRequest,
    ResetPasswordRequest,
    SuccessResponse,
    VerifyResetCodeResponse,
    ResetErrorResponse,
)
from app.services.password_reset_service import PasswordResetService

# ============================================================
# Router Setup
# ============================================================

router = APIRouter(tags=["Password Reset"])


# ============================================================
# Request Reset Code Endpoint
# ============================================================

@router.post(
    "/request",
    response_model=SuccessResponse,
    responses={
        200: {"description": "Reset code sent if the email has an account"},
        400: {"model": ResetErrorResponse, "description": "Missing or malformed email"},
    }
)
async def request_reset_code(
    request_data: ResetCodeRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db)
):
    """
    Email a 6-digit reset code.

    Always reports success so the response never reveals whether
    an account exists for the email.
    """
    service = PasswordResetService(db)
    await service.request_flow(request_data.email, background_tasks)
    return SuccessResponse()


# ============================================================
# Verify Reset Code Endpoint
# ============================================================

@router.post(
    "/verify",
    response_model=VerifyResetCodeResponse,
    responses={
        400: {"model": ResetErrorResponse, "description": "Missing email or code"},
    }
)
async def verify_reset_code(
    request_data: VerifyResetCodeRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Check a reset code without using it up.

    Unknown emails get `{"valid": false}`, same as a wrong code.
    """
    service = PasswordResetService(db)
    valid = await service.verify_flow(request_data.email, request_data.code)
    return VerifyResetCodeResponse(valid=valid)


# ============================================================
# Reset Password Endpoint
# ============================================================

@router.post(
    "/reset",
    response_model=SuccessResponse,
    responses={
        400: {"model": ResetErrorResponse, "description": "Invalid code or new password"},
    }
)
async def reset_password(
    request_data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Spend a reset code and set a new password.

    - **email**: Email address that requested the reset
    - **code**: 6-digit code from the email
    - **newPassword**: At least 8 characters
    """
    service = PasswordResetService(db)

    try:
        await service.reset_flow(
            request_data.email,
            request_data.code,
            request_data.new_password
        )
    except InvalidResetCode as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ResetErrorResponse(error=e.public_message).model_dump()
        )

    return SuccessResponse()
