# Overview: Service-layer operations for worker accounts.

from __future__ import annotations

import logging

from ..extensions import db
from ..models import User, UserRole
from ..models.auth import ROLE_WORKER
from . import auth_service, session_service


logger = logging.getLogger(__name__)


class WorkerError(ValueError):
    """Raised for invalid worker account operations."""
    pass


def create_worker(
    *,
    full_name: str,
    email: str,
    password: str,
    phone: str | None = None,
    rounds: int = auth_service.BCRYPT_ROUNDS,
) -> User:
    """
    Provision a worker account.

    Name, email and password are required; PasswordValidationError
    propagates unchanged so routes can report the exact rule.
    """
    if not (full_name or "").strip():
        raise WorkerError("full_name is required")
    if not (email or "").strip():
        raise WorkerError("email is required")
    if not password:
        raise WorkerError("password is required")

    try:
        return auth_service.create_user(
            email=email,
            password=password,
            role=ROLE_WORKER,
            full_name=full_name,
            phone=phone,
            rounds=rounds,
        )
    except ValueError as exc:
        db.session.rollback()
        raise WorkerError(str(exc)) from exc


def list_workers() -> list[User]:
    return (
        db.session.query(User)
        .join(UserRole, UserRole.user_id == User.id)
        .filter(UserRole.role == ROLE_WORKER)
        .order_by(User.full_name, User.email)
        .all()
    )


def get_worker(user_id: int) -> User | None:
    return (
        db.session.query(User)
        .join(UserRole, UserRole.user_id == User.id)
        .filter(User.id == user_id, UserRole.role == ROLE_WORKER)
        .first()
    )


def set_active(user_id: int, is_active: bool | None = None) -> User:
    """
    Activate or deactivate a worker; None flips the current state.

    Deactivating revokes every open session of that worker.
    """
    worker = get_worker(user_id)
    if not worker:
        raise WorkerError("Worker not found")

    worker.is_active = (not worker.is_active) if is_active is None else is_active
    db.session.commit()

    if not worker.is_active:
        revoked = session_service.revoke_all_user_sessions(worker.id, reason="Worker deactivated")
        logger.info("Deactivated worker %s, revoked %d session(s)", worker.id, revoked)

    return worker


def names_by_id(user_ids) -> dict[int, str]:
    """Batch-resolve display names."""
    ids = set(user_ids)
    if not ids:
        return {}
    rows = db.session.query(User.id, User.full_name, User.email).filter(User.id.in_(ids)).all()
    return {row.id: row.full_name or row.email for row in rows}
