"""
Password hashing and user lookup
"""
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.infrastructure.db.models import User

PBKDF2_MIN_ROUNDS = 29000

# New hashes use pbkdf2_sha256. bcrypt and low-round pbkdf2 hashes still
# verify, and are replaced on the next successful login.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256", "bcrypt"],
    deprecated="auto",
    pbkdf2_sha256__min_rounds=PBKDF2_MIN_ROUNDS,
    pbkdf2_sha256__default_rounds=PBKDF2_MIN_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(user: User, password: str) -> bool:
    """
    Verify `password` for `user`, re-hashing a stale stored hash in place.

    The caller commits; nothing changes when the password is wrong.
    """
    ok, new_hash = pwd_context.verify_and_update(password, user.password_hash)
    if ok and new_hash:
        user.password_hash = new_hash
    return ok


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)
