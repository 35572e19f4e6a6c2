"""Shared test fixtures for Roborock client tests."""

from __future__ import annotations

import pytest

from roborock_client.client import RoborockS5Client
from tests.fakes import GEN3_STATUS, LEGACY_STATUS, FakeChannel


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def legacy_client(channel: FakeChannel) -> RoborockS5Client:
    """Client that has seen a pre-gen3 status."""
    client = RoborockS5Client(channel)
    client.update_from_status(LEGACY_STATUS)
    return client


@pytest.fixture
def gen3_client(channel: FakeChannel) -> RoborockS5Client:
    """Client that has seen a gen3 status."""
    client = RoborockS5Client(channel)
    client.update_from_status(GEN3_STATUS)
    return client
