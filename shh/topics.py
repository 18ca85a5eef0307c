"""
Topics.

A full topic is a list of 32-byte parts, each the Keccak-256 of an
application-chosen string. Envelopes carry only the abridged form: the first
4 bytes of every part, in the same order. The full parts double as the shared
secrets of broadcast sealing, so knowing the topic is what lets a receiver read.
"""
from typing import List, Sequence, Union

from shh.crypto import keccak256
from shh.errors import InvalidTopicError

TOPIC_PART_SIZE = 32
ABRIDGED_SIZE = 4

FullTopic = List[bytes]
Topic = List[bytes]


def build_topic(*parts: Union[str, bytes]) -> FullTopic:
    '''
    The function hashes application topic strings into a full topic.
        Input: one or more topic strings (str is UTF-8 encoded) or raw bytes
        Output: list of 32-byte topic parts
    '''
    full = []
    for p in parts:
        raw = p.encode("utf-8") if isinstance(p, str) else bytes(p)
        full.append(keccak256(raw))
    return full

def abridge(full_topic: Sequence[bytes]) -> Topic:
    '''
    The function cuts every full topic part down to its 4-byte tag.
        Input: full topic (32-byte parts)
        Output: list of 4-byte tags, same order
    '''
    check_full_topic(full_topic)
    return [part[:ABRIDGED_SIZE] for part in full_topic]

def check_full_topic(full_topic: Sequence[bytes]) -> None:
    for i, part in enumerate(full_topic):
        if len(part) != TOPIC_PART_SIZE:
            raise InvalidTopicError(f"topic part {i} is {len(part)} bytes, expected {TOPIC_PART_SIZE}")
