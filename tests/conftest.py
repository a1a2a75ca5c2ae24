from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from core.logger import CategoryLogger, configure_category_logger
from middlewares.login_guard import LoginAttemptGuard, reset_login_guard
from services.account_service import AccountService, get_account_service


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeTime:
    def __init__(self, start: float = 1_000_000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class RecordingConsole:
    def __init__(self):
        self.lines: list[str] = []

    def msg(self, message: str) -> None:
        self.lines.append(message)


def read_sink(logger: CategoryLogger, sink: str) -> str:
    paths = sorted(logger.log_dir.glob(f"{sink}-*.log"))
    return "".join(p.read_text(encoding="utf-8") for p in paths)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture(autouse=True)
def category_logger(tmp_path, console) -> CategoryLogger:
    return configure_category_logger(log_dir=tmp_path / "logs", debug_enabled=False, console=console)


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture(autouse=True)
def login_guard(fake_time) -> LoginAttemptGuard:
    return reset_login_guard(LoginAttemptGuard(max_attempts=5, block_seconds=300, time_func=fake_time))


@pytest.fixture
def accounts() -> AccountService:
    svc = AccountService()
    svc.register(name="Ana", email="ana@example.com", password="S3cret!pass")
    return svc


@pytest.fixture
def app(category_logger, accounts):
    from main import create_app

    application = create_app(category_logger)
    application.dependency_overrides[get_account_service] = lambda: accounts
    return application


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def sink_text(category_logger):
    def _read(sink: str) -> str:
        return read_sink(category_logger, sink)

    return _read
