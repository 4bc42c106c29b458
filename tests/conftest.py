"""Shared fixtures for the CertifyGRC test suite"""

import os
from datetime import datetime, timedelta, timezone

import pytest

# The Flask app builds its storage at import time
os.environ.setdefault("STORAGE_BACKEND", "memory")

from certify_grc.assessment_manager import AssessmentManager
from certify_grc.catalog import get_domain
from certify_grc.storage import MemoryStorage
from certify_grc.workspace import Workspace


class FixedClock:
    """Returns the same instant unless advanced"""

    def __init__(self, start=datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds=1):
        self.now += timedelta(seconds=seconds)


class Notifications(list):
    def __call__(self, title, message, category="info"):
        self.append((title, message, category))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def notifications():
    return Notifications()


@pytest.fixture
def context_manager(storage, clock, notifications):
    """Manager of the 4-section Context of Organization domain"""
    return AssessmentManager(get_domain("context-of-organization"), storage,
                             clock=clock, notify=notifications)


@pytest.fixture
def workspace(storage, clock, notifications):
    return Workspace(storage, clock=clock, notify=notifications)


@pytest.fixture
def client(monkeypatch, storage, clock):
    import app as app_module

    monkeypatch.setattr(app_module, "workspace",
                        Workspace(storage, clock=clock, notify=app_module.notify_user))
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as test_client:
        yield test_client
