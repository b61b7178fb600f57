"""
Pytest configuration and shared fixtures.

Every protocol test talks to a ``FakeTransport`` through a real
``ConnectionManager``, the same way the bot and the read API do.
"""

import pytest

from tests.fakes import FakeTransport, make_conn


@pytest.fixture
def fake():
    return FakeTransport()


@pytest.fixture
def conn(fake):
    return make_conn(fake)
