"""
Envelope: the wire record of a sealed message.

Fields stay fixed once the envelope is built. The nonce is the exception:
prove_work() searches for it and is the only thing that writes it, so one
caller at a time may hold an envelope while proving work on it.
"""
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from shh import config
from shh.crypto import keccak256, leading_zero_bits
from shh.protocol import pack_envelope, pack_without_nonce, unpack_envelope

logger = logging.getLogger(__name__)

NONCE_BITS = 256
NONCE_SIZE = NONCE_BITS // 8
COUNTER_MASK = 0xFFFFFFFF   # the search counter lives in the low 32 bits of the nonce


@dataclass
class Envelope:
    expiry: int              # absolute expiry, seconds since epoch
    ttl: int                 # requested time-to-live, seconds
    topics: List[bytes]      # 4-byte tags; position = key slot in broadcast mode
    data: bytes              # sealed frame, format depends on how it was sealed
    nonce: int = 0           # proof-of-work solution

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Envelope":
        '''
        Build an envelope from transport bytes. Fields are copied verbatim,
        validation is left to open().
        Raises MalformedEnvelopeError when raw is not a 5-field record.
        '''
        expiry, ttl, topics, data, nonce = unpack_envelope(raw)
        return cls(expiry=expiry, ttl=ttl, topics=topics, data=data, nonce=nonce)

    def to_bytes(self) -> bytes:
        ''' Wire encoding, nonce included '''
        return pack_envelope(self.expiry, self.ttl, self.topics, self.data, self.nonce)

    def hash(self) -> bytes:
        ''' Keccak-256 of the wire encoding; transports use it to drop duplicates '''
        return keccak256(self.to_bytes())

    def is_expired(self, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.time()
        return now >= self.expiry

    def _work_base(self) -> bytes:
        # H(envelope without nonce), taken from the current fields on every call
        return keccak256(pack_without_nonce(self.expiry, self.ttl, self.topics, self.data))

    def work_proved(self) -> int:
        '''
        The function scores the stored nonce.
            Output: leading zero bits of H(H(envelope without nonce) || nonce)
        A nonce that does not fit in 256 bits scores 0.
        '''
        if self.nonce < 0 or self.nonce >> NONCE_BITS:
            return 0
        return leading_zero_bits(keccak256(self._work_base() + self.nonce.to_bytes(NONCE_SIZE, "big")))

    def prove_work(self, budget_ms: int) -> int:
        '''
        Search nonces 0, 1, 2, ... for the one whose hash has the most leading
        zero bits, until budget_ms milliseconds have passed, and keep it.

        This is best effort, there is no target: a longer budget simply tends to
        buy a higher score. The clock is read once per batch of
        config.POW_BATCH candidates, so the call may run past the deadline by
        up to one batch. Only a strictly higher score replaces the best nonce,
        which leaves the nonce untouched when nothing beats a score of zero.

        Input:
            - budget_ms: wall-clock budget in milliseconds
        Output: the best score found
        '''
        base = self._work_base()
        batch = config.POW_BATCH
        best = 0
        n = 0
        tried = 0
        deadline = time.monotonic() + budget_ms / 1000.0
        while time.monotonic() < deadline:
            for _ in range(batch):
                score = leading_zero_bits(keccak256(base + n.to_bytes(NONCE_SIZE, "big")))
                if score > best:
                    best = score
                    self.nonce = n
                n = (n + 1) & COUNTER_MASK
            tried += batch
        logger.debug("proof-of-work: %d candidates in %d ms, best %d bits (nonce %d)",
                     tried, budget_ms, best, self.nonce)
        return best

    def open(self, mode):
        '''
        Try to open this envelope. See Message.open() for the modes.
            Output: Message, or None when mode does not open it
        '''
        # messages imports this module at load time
        from shh.messages import Message
        return Message.open(self, mode)
