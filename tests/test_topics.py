"""
shh topic tests
"""

import pytest

from shh.crypto import keccak256
from shh.errors import InvalidTopicError
from shh.topics import abridge, build_topic


class TestTopics:
    """Tests for full and abridged topics."""

    def test_build_topic(self):
        full = build_topic("chat", b"raw")
        assert full == [keccak256(b"chat"), keccak256(b"raw")]

    def test_abridge(self):
        full = build_topic("chat", "weather")
        tags = abridge(full)
        assert tags == [full[0][:4], full[1][:4]]
        assert all(len(t) == 4 for t in tags)

    def test_abridge_keeps_order(self):
        assert abridge(build_topic("b", "a")) == list(reversed(abridge(build_topic("a", "b"))))

    def test_abridge_rejects_short_part(self):
        with pytest.raises(InvalidTopicError):
            abridge([b"\x00" * 31])
