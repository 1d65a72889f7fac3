"""
Authentication API (register, login, logout, profile)
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.application.users import (
    RegisterUserUseCase, AuthenticateUserUseCase, UpdateProfileUseCase, ChangePasswordUseCase,
    UserValidationError, InvalidCredentialsError, user_to_dict,
)
from app.infrastructure.db.models import User
from app.utils.validation import normalize_email, validate_password


router = APIRouter(prefix="/api/auth", tags=["auth"])


# === Request models ===

class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: str
    password: str
    confirmPassword: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be between 2 and 50 characters")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirmPassword != self.password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)


class PreferencesRequest(BaseModel):
    reminderDays: int | None = Field(default=None, ge=1, le=30)
    emailNotifications: bool | None = None


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=50)
    email: str | None = None
    preferences: PreferencesRequest | None = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        return normalize_email(v) if v else v


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword: str

    @field_validator("newPassword")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


# === Endpoints ===

@router.post("/register", status_code=201)
def register(request: Request, req: RegisterRequest, db: Session = Depends(get_db)):
    """Register and log in"""
    try:
        user = RegisterUserUseCase(db).execute(name=req.name, email=req.email, password=req.password)
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    request.session["user_id"] = user.id
    return {
        "success": True,
        "message": "User registered successfully",
        "user": user_to_dict(user),
    }


@router.post("/login")
def login(request: Request, req: LoginRequest, db: Session = Depends(get_db)):
    """Log in with email + password"""
    try:
        user = AuthenticateUserUseCase(db).execute(email=req.email, password=req.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))

    request.session["user_id"] = user.id
    return {"success": True, "message": "Login successful", "user": user_to_dict(user)}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"success": True, "message": "Logged out"}


@router.get("/me")
def get_me(user: User = Depends(get_current_user)):
    return {"success": True, "user": user_to_dict(user)}


@router.put("/update")
def update_profile(
    req: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    preferences = None
    if req.preferences is not None:
        preferences = {
            "reminder_days": req.preferences.reminderDays,
            "email_notifications": req.preferences.emailNotifications,
        }
    try:
        updated = UpdateProfileUseCase(db).execute(
            user_id=user.id, name=req.name, email=req.email, preferences=preferences,
        )
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "message": "Profile updated successfully", "user": user_to_dict(updated)}


@router.put("/change-password")
def change_password(
    req: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        ChangePasswordUseCase(db).execute(
            user_id=user.id, current_password=req.currentPassword, new_password=req.newPassword,
        )
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))

    return {"success": True, "message": "Password changed successfully"}
