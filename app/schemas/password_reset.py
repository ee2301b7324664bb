from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ============================================================
# Request Schemas
# ============================================================

class ResetCodeRequest(BaseModel):
    """Ask for a reset code to be emailed"""
    email: EmailStr

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "grants@acme.org"}}
    )


class VerifyResetCodeRequest(BaseModel):
    """Check a reset code without spending it"""
    email: EmailStr
    code: str = Field(
        min_length=1,
        max_length=32,
        description="6-digit reset code"
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "grants@acme.org", "code": "482913"}}
    )


class ResetPasswordRequest(BaseModel):
    """Spend a reset code and set a new password"""
    email: EmailStr
    code: str = Field(
        min_length=1,
        max_length=32,
        description="6-digit reset code"
    )
    new_password: str = Field(
        alias="newPassword",
        min_length=8,
        max_length=100,
        description="Password must be 8-100 characters"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "email": "grants@acme.org",
                "code": "482913",
                "newPassword": "NewSecurePass123"
            }
        }
    )


# ============================================================
# Response Schemas
# ============================================================

class SuccessResponse(BaseModel):
    success: bool = True


class VerifyResetCodeResponse(BaseModel):
    valid: bool


class ResetErrorResponse(BaseModel):
    """Every failed reset has this exact shape"""
    error: str
