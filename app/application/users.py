"""
User account use cases: registration, login, profile and password changes.
"""
import logging

from sqlalchemy.orm import Session

from app.auth import hash_password, check_password, get_user_by_email, get_user_by_id
from app.domain.subscription import REMINDER_DAYS_MIN, REMINDER_DAYS_MAX
from app.infrastructure.db.models import User

logger = logging.getLogger(__name__)


class UserValidationError(ValueError):
    pass


class InvalidCredentialsError(ValueError):
    pass


def user_to_dict(user: User) -> dict:
    """Public view of a user (no password hash)."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "preferences": {
            "currency": user.currency,
            "reminderDays": user.reminder_days,
            "emailNotifications": user.email_notifications,
        },
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


class RegisterUserUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, name: str, email: str, password: str) -> User:
        email = email.strip().lower()
        if get_user_by_email(self.db, email):
            raise UserValidationError("User already exists with this email")

        user = User(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
        )
        self.db.add(user)
        self.db.flush()
        self.db.commit()
        logger.info("Registered user #%d", user.id)
        return user


class AuthenticateUserUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, email: str, password: str) -> User:
        user = get_user_by_email(self.db, email)
        if not user or not check_password(user, password):
            raise InvalidCredentialsError("Invalid email or password")
        if self.db.is_modified(user):
            self.db.commit()
            logger.info("Upgraded password hash for user #%d", user.id)
        return user


class UpdateProfileUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        user_id: int,
        name: str | None = None,
        email: str | None = None,
        preferences: dict | None = None,
    ) -> User:
        user = get_user_by_id(self.db, user_id)
        if not user:
            raise UserValidationError("User not found")

        if name:
            user.name = name.strip()
        if email:
            email = email.strip().lower()
            existing = get_user_by_email(self.db, email)
            if existing and existing.id != user.id:
                raise UserValidationError("Email already in use")
            user.email = email
        if preferences:
            days = preferences.get("reminder_days")
            if days is not None:
                if not REMINDER_DAYS_MIN <= days <= REMINDER_DAYS_MAX:
                    raise UserValidationError(
                        f"Reminder days must be between {REMINDER_DAYS_MIN} and {REMINDER_DAYS_MAX}"
                    )
                user.reminder_days = days
            if preferences.get("email_notifications") is not None:
                user.email_notifications = preferences["email_notifications"]

        self.db.commit()
        self.db.refresh(user)
        return user


class ChangePasswordUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, user_id: int, current_password: str, new_password: str) -> None:
        user = get_user_by_id(self.db, user_id)
        if not user:
            raise UserValidationError("User not found")
        if not check_password(user, current_password):
            raise InvalidCredentialsError("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        self.db.commit()
        logger.info("Password changed for user #%d", user_id)
