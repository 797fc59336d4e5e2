"""
Tests for core helpers: deadlines, error kinds, settings parsing and driver timeouts.
"""
import time

import pytest

from app.core.config import Settings
from app.core.deadline import Deadline, ensure_deadline
from app.core.errors import (
    ConflictError, ErrorKind, ForbiddenError, HTTP_STATUS_BY_KIND, InternalError,
    NotFoundError, ServiceError, UnauthorizedError, ValidationFailedError
)
from app.db.session import driver_timeout_args


def test_every_kind_has_a_status():
    assert set(HTTP_STATUS_BY_KIND) == set(ErrorKind)


@pytest.mark.parametrize("error_class, kind", [
    (UnauthorizedError, ErrorKind.UNAUTHORIZED),
    (ForbiddenError, ErrorKind.FORBIDDEN),
    (NotFoundError, ErrorKind.NOT_FOUND),
    (ConflictError, ErrorKind.CONFLICT),
    (ValidationFailedError, ErrorKind.VALIDATION_FAILED),
    (InternalError, ErrorKind.INTERNAL),
])
def test_error_kinds(error_class, kind):
    error = error_class("some_reason")
    assert isinstance(error, ServiceError)
    assert error.kind is kind
    assert error.reason == "some_reason"


def test_deadline_unbounded():
    deadline = Deadline(timeout=0)
    assert deadline.remaining() is None
    assert not deadline.expired
    deadline.check()


def test_deadline_expiry():
    deadline = Deadline(timeout=30)
    assert 0 < deadline.remaining() <= 30
    deadline.check()

    deadline.expires_at = time.monotonic() - 0.1
    with pytest.raises(InternalError) as exc_info:
        deadline.check("splits")
    assert exc_info.value.reason == "deadline_exceeded:splits"


def test_ensure_deadline_keeps_callers_deadline():
    deadline = Deadline(timeout=5)
    assert ensure_deadline(deadline) is deadline
    assert isinstance(ensure_deadline(None), Deadline)


def test_settings_parsing():
    settings = Settings(
        CORS_ORIGINS="http://a.test, http://b.test,",
        SNAPSHOT_ISOLATION_LEVEL="repeatable_read"
    )
    assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]
    assert settings.SNAPSHOT_ISOLATION_LEVEL == "REPEATABLE READ"


@pytest.mark.parametrize("url, timeout, expected", [
    ("mysql+pymysql://u:p@db/x", 10.0, {"read_timeout": 10, "write_timeout": 10}),
    ("mysql+pymysql://u:p@db/x", 0.2, {"read_timeout": 1, "write_timeout": 1}),
    ("postgresql+psycopg2://u:p@db/x", 2.5, {"options": "-c statement_timeout=2500"}),
    ("mysql+pymysql://u:p@db/x", 0, {}),
    ("sqlite:///ledger.db", 10.0, {}),
])
def test_driver_timeout_args(url, timeout, expected):
    assert driver_timeout_args(url, timeout) == expected
