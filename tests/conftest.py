"""Shared fixtures for the API test suite."""

import pytest
from django.core.cache import caches
from rest_framework.test import APIClient

from accounts.services import find_or_create_user, issue_session
from entries.cache import EntryCache
from entries.services import EntryService


@pytest.fixture(autouse=True)
def _clear_cache(settings):
    caches[settings.ENTRY_CACHE_ALIAS].clear()
    yield
    caches[settings.ENTRY_CACHE_ALIAS].clear()


@pytest.fixture
def user(db):
    return find_or_create_user(
        external_id="google-123",
        email="rose@example.com",
        name="Rose Tester",
        avatar_url="https://example.com/rose.png",
    )


@pytest.fixture
def other_user(db):
    return find_or_create_user(external_id="google-456", email="thorn@example.com", name="Thorn Tester")


@pytest.fixture
def token(user):
    return issue_session(user)["access_token"]


@pytest.fixture
def client_anon():
    return APIClient()


@pytest.fixture
def api_client(token):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}", HTTP_USER_AGENT="pytest-agent")
    return client


@pytest.fixture
def entry_cache(settings):
    return EntryCache()


@pytest.fixture
def service(entry_cache):
    return EntryService(cache=entry_cache)
