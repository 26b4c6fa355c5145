"""
Pytest fixtures for Dino Play backend tests.

Provides the in-memory test app, a per-test table wipe, accounts with
bearer tokens, and today's daily configuration.
"""

import pytest

from dinoplay import create_app
from dinoplay.extensions import db
from dinoplay.models.auth import ROLE_ADMIN, ROLE_WORKER
from dinoplay.services import session_service
from dinoplay.services.auth_service import create_user
from dinoplay.services.daily_config_service import ProductSpec, save_config
from dinoplay.shift_state import VrCounterStore
from dinoplay.time_utils import venue_today_date


TEST_PASSWORD = "DinoTest123"

# Fast bcrypt for fixtures; production uses BCRYPT_ROUNDS
TEST_ROUNDS = 4


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        app.extensions["vr_counters"] = VrCounterStore()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


def make_user(email: str, role: str, full_name: str = "Test User"):
    return create_user(email, TEST_PASSWORD, role, full_name=full_name, rounds=TEST_ROUNDS)


def token_for(user) -> str:
    _, token = session_service.create_session(user.id)
    return token


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin(db_session):
    return make_user("admin@dinoplay.test", ROLE_ADMIN, full_name="Admin Dino")


@pytest.fixture(scope='function')
def worker(db_session):
    return make_user("ana@dinoplay.test", ROLE_WORKER, full_name="Ana Torres")


@pytest.fixture(scope='function')
def other_worker(db_session):
    return make_user("luis@dinoplay.test", ROLE_WORKER, full_name="Luis Pardo")


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers(token_for(admin))


@pytest.fixture(scope='function')
def worker_headers(worker):
    return auth_headers(token_for(worker))


@pytest.fixture(scope='function')
def today_config(db_session, admin):
    """Today's config: 60.000 float, 100 tokens, two ad-hoc products."""
    config, _ = save_config(
        config_date=venue_today_date(),
        base_money=60000,
        initial_tokens=100,
        products=[
            ProductSpec("Gaseosa", 5, 3000),
            ProductSpec("Papas", 3, 2500),
        ],
        created_by=admin.id,
    )
    return config


def full_checklist() -> dict:
    return {
        "machines_disconnected": True,
        "machines_cleaned": True,
        "floor_swept": True,
        "sign_collected": True,
    }
