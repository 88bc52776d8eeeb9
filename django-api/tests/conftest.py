"""Pytest configuration and shared fixtures."""

import pytest
from django.contrib.auth import get_user_model
from fakes import InMemoryLedgerStore
from rest_framework.test import APIClient

from ledger.services import AggregateService, CapacityService, CartService
from ledger.stores import DjangoLedgerStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def capacity(store: InMemoryLedgerStore) -> CapacityService:
    return CapacityService(store, store)


@pytest.fixture
def aggregates(store: InMemoryLedgerStore) -> AggregateService:
    return AggregateService(store, store, store)


@pytest.fixture
def cart(store: InMemoryLedgerStore) -> CartService:
    return CartService(store, store)


@pytest.fixture
def django_store() -> DjangoLedgerStore:
    return DjangoLedgerStore()


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username="alice", password="secret")


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username="bob", password="secret")


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_superuser(
        username="admin", password="secret", email="admin@example.com"
    )


@pytest.fixture
def user_client(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
