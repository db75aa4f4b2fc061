import os
import sys

import pytest
from werkzeug.security import generate_password_hash

# Path setup before any project imports
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

from tests.helpers import (  # noqa: E402
    ADMIN_ID,
    ADMIN_PASSWORD,
    ADMIN_TOKEN,
    SUPER_ID,
    SUPER_PASSWORD,
    SUPER_TOKEN,
    login,
)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def password_hashes():
    # scrypt is deliberately slow; hash once per session
    return {
        "admin": generate_password_hash(ADMIN_PASSWORD),
        "super": generate_password_hash(SUPER_PASSWORD),
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth_config(password_hashes):
    return {
        "ADMIN_ID": ADMIN_ID,
        "ADMIN_PASSWORD_HASH": password_hashes["admin"],
        "SUPER_ADMIN_ID": SUPER_ID,
        "SUPER_ADMIN_PASSWORD_HASH": password_hashes["super"],
        "ADMIN_SESSION_TOKEN": ADMIN_TOKEN,
        "SUPER_ADMIN_SESSION_TOKEN": SUPER_TOKEN,
        "ADMIN_PASSWORD": "",
        "SUPER_ADMIN_PASSWORD": "",
        "ADMIN_ALLOWED_KEYS": [],
        "ALLOW_PLAINTEXT_PASSWORDS": False,
        "TRUST_PROXY_HEADERS": False,
    }


@pytest.fixture
def make_app(tmp_path, auth_config, clock):
    from corpsite import create_app
    from corpsite.login_throttle_memory import MemoryLoginThrottle

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        db_path = tmp_path / f"app{counter['n']}.db"
        cfg = {
            "TESTING": True,
            "SECRET_KEY": "test",
            "database_url": f"sqlite:///{db_path}",
            "FORCE_DB_REINIT": True,
            **auth_config,
            **overrides,
        }
        app = create_app(cfg)
        app.login_throttle = MemoryLoginThrottle(
            max_failures=app.config["LOGIN_MAX_FAILURES"],
            block_seconds=app.config["LOGIN_BLOCK_SECONDS"],
            clock=clock,
        )
        return app

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def super_client(app):
    c = app.test_client()
    r = login(c, SUPER_ID, SUPER_PASSWORD)
    assert r.status_code == 200, r.get_json()
    return c


@pytest.fixture
def admin_client(app):
    c = app.test_client()
    r = login(c, ADMIN_ID, ADMIN_PASSWORD)
    assert r.status_code == 200, r.get_json()
    return c
