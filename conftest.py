from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest

# Ensure project root is on sys.path before tests import modules
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fonokids.apigateway.settings import Settings
from fonokids.authservice import AuthConfig, AuthService, PasswordHasher
from fonokids.notifier import InMemoryNotifier
from fonokids.patientstore import InMemoryPatientStore

TEST_SECRET = "test-secret"
START = datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, start: datetime = START):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta) -> None:
        self._now += timedelta(**delta)


class SequenceCodes:
    """Hands out the given codes in order."""
    def __init__(self, *codes: str):
        self._codes = list(codes)

    def __call__(self) -> str:
        return self._codes.pop(0)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return InMemoryPatientStore()


@pytest.fixture
def notifier():
    return InMemoryNotifier()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def cfg():
    return AuthConfig.build(TEST_SECRET, bcrypt_rounds=4)


@pytest.fixture
def settings():
    return Settings(_env_file=None, JWT_SECRET=TEST_SECRET, BCRYPT_ROUNDS=4, LOG_LEVEL="WARNING")


@pytest.fixture
def codes():
    return SequenceCodes("042817", "551203", "900001", "000042")


@pytest.fixture
def auth_service(store, notifier, cfg, clock, codes):
    return AuthService(store=store, notifier=notifier, cfg=cfg, clock=clock, code_generator=codes)


@pytest.fixture
def anyio_backend():
    return "asyncio"
