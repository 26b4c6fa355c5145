# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Every settlement is attributed to the worker who saved it, so there are no
shared logins. Passwords are hashed with bcrypt.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, at least one letter and one digit
- Session tokens managed separately (see session_service.py)
- Inactive accounts cannot authenticate
"""

import logging
import re

import bcrypt

from ..extensions import db
from ..models import User, UserRole
from ..models.auth import ROLES
from dinoplay.time_utils import utcnow


logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_user(
    email: str,
    password: str,
    role: str,
    full_name: str = "",
    phone: str | None = None,
    *,
    rounds: int = BCRYPT_ROUNDS,
) -> User:
    """
    Create a user with a single role.

    Raises:
        ValueError: If the email is taken or the role is unknown
        PasswordValidationError: If password doesn't meet requirements
    """
    email = normalize_email(email)
    if not email:
        raise ValueError("email is required")
    if role not in ROLES:
        raise ValueError(f"Unknown role '{role}'")

    existing = db.session.query(User).filter_by(email=email).first()
    if existing:
        raise ValueError("A user with this email already exists")

    # Hash password with bcrypt (validates strength automatically)
    password_hash = hash_password(password, rounds=rounds)

    user = User(
        email=email,
        password_hash=password_hash,
        full_name=(full_name or "").strip(),
        phone=(phone or "").strip() or None,
        is_active=True,
    )
    user.role_assignment = UserRole(role=role)

    db.session.add(user)
    db.session.commit()

    logger.info("Created %s account %s (id=%s)", role, email, user.id)
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid and the account is active, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    user = db.session.query(User).filter(
        User.email == normalize_email(email),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None
