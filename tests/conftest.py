"""
shh test fixtures
"""

import pytest

from shh.crypto import generate_private_key
from shh.topics import build_topic


@pytest.fixture
def alice():
    """Signer's private key."""
    return generate_private_key()


@pytest.fixture
def bob():
    """Recipient's private key."""
    return generate_private_key()


@pytest.fixture
def mallory():
    """A key unrelated to any message."""
    return generate_private_key()


@pytest.fixture
def topic():
    """Three-part full topic."""
    return build_topic("chat", "weather", "prices")
