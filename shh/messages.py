"""
Message: the plaintext side of an envelope.

Sealing turns a Message into an Envelope:

    frame = flags (1 byte) || payload [|| signature (65 bytes)]

and then, depending on what the author asked for, either encrypts the frame
for one recipient key, encrypts it once for every holder of the topic, or
leaves it in the clear.

Opening goes the other way. The opener says how to try (DecryptMode); nothing
in the envelope says how it was sealed. Bad keys, foreign envelopes and
garbage bytes all come back as None.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from shh import config
from shh.crypto import (
    SIGNATURE_SIZE, PrivateKey, PublicKey,
    aes_decrypt, aes_encrypt, aes_key, decrypt, encrypt, keccak256, recover, sign, xor_bytes,
)
from shh.envelope import Envelope
from shh.errors import InvalidTopicError, SignatureRoundTripError
from shh.topics import TOPIC_PART_SIZE, abridge

logger = logging.getLogger(__name__)

CONTAINS_SIGNATURE = 0x01   # flags bit 0


# --- decrypt modes -----------------------------------------------------------

@dataclass(frozen=True)
class Direct:
    """Open with the recipient's own private key (asymmetric mode)."""
    secret: PrivateKey

@dataclass(frozen=True)
class TopicIndexed:
    """Open with the shared secret of one topic slot (broadcast mode)."""
    secret: bytes       # 32-byte full topic part
    topic_index: int    # position of that part in the envelope's topics

@dataclass(frozen=True)
class Plain:
    """Read a frame that was sealed without encryption."""
    pass

DecryptMode = Union[Direct, TopicIndexed, Plain]


# --- message ----------------------------------------------------------------

@dataclass(frozen=True)
class Message:
    payload: bytes
    sender: Optional[PublicKey] = None      # only ever set from a recovered signature
    recipient: Optional[PublicKey] = None   # seal: encrypt for this key; open: set in Direct mode

    def seal(self, sender_secret: Optional[PrivateKey] = None, topic: Sequence[bytes] = (),
             ttl: Optional[int] = None, work_ms: Optional[int] = None,
             broadcast: bool = False) -> Envelope:
        '''
        Build the frame, sign it if a sender secret is given, encrypt it and
        wrap it in a proof-of-worked envelope.

        Input:
            - sender_secret: signer's private key, or None for an anonymous message
            - topic: full topic (32-byte parts); the envelope carries its abridged form
            - ttl: seconds to live (config.DEFAULT_TTL when None)
            - work_ms: proof-of-work budget in ms (config.DEFAULT_WORK_MS when None)
            - broadcast: with no recipient, encrypt so that every holder of a
              topic part can open it; otherwise the frame stays in the clear
        Output: sealed Envelope
        Raises SignatureRoundTripError if the new signature does not recover to
        sender_secret's public key, and InvalidTopicError for bad topic parts.
        '''
        ttl = config.DEFAULT_TTL if ttl is None else ttl
        work_ms = config.DEFAULT_WORK_MS if work_ms is None else work_ms
        topics = abridge(topic)

        frame = bytearray(1 + len(self.payload))
        frame[1:] = self.payload

        if sender_secret is not None:
            h = keccak256(self.payload)
            sig = sign(sender_secret, h)
            # anything else means sign and recover disagree; never ship that
            recovered = recover(sig, h)
            expected = sender_secret.public_key
            if recovered is None or recovered.to_bytes() != expected.to_bytes():
                logger.critical("signature does not recover to signer %s", expected.to_hex())
                raise SignatureRoundTripError(f"signature by {expected.to_hex()} does not recover to its signer")
            frame[0] |= CONTAINS_SIGNATURE
            frame += sig

        if self.recipient is not None:
            data = encrypt(self.recipient, bytes(frame))
        elif broadcast:
            data = _seal_for_topic(topic, bytes(frame))
        else:
            data = bytes(frame)

        env = Envelope(expiry=int(time.time()) + ttl, ttl=ttl, topics=topics, data=data)
        env.prove_work(work_ms)
        return env

    @classmethod
    def open(cls, envelope: Envelope, mode: DecryptMode) -> Optional["Message"]:
        '''
        Try to read an envelope.

        Direct: decrypt with mode.secret; on success recipient is that key's public key.
        TopicIndexed: the content key is mode.secret xor key slot mode.topic_index;
            recipient stays unset.
        Plain: the data is the frame itself.

        A signed frame yields the recovered sender. Output is None whenever the
        mode does not open the envelope or its contents are malformed.
        '''
        if not isinstance(mode, (Direct, TopicIndexed, Plain)):
            raise TypeError(f"unknown decrypt mode {mode!r}")
        try:
            recipient = None
            if isinstance(mode, Direct):
                frame = decrypt(mode.secret, envelope.data)
                recipient = mode.secret.public_key
            elif isinstance(mode, TopicIndexed):
                frame = _open_for_topic(envelope, mode.secret, mode.topic_index)
            else:
                frame = envelope.data
            if frame is None:
                return None

            parsed = _parse_frame(frame)
            if parsed is None:
                return None
            payload, sender = parsed
            return cls(payload=payload, sender=sender, recipient=recipient)
        except Exception as e:
            # wrong key, tampered bytes, bad secret material
            logger.debug("envelope %s not opened with %s: %s", type(mode).__name__,
                         envelope.topics, e)
            return None


def _seal_for_topic(topic: Sequence[bytes], frame: bytes) -> bytes:
    '''
    One random content key, blinded once per topic part:
        (K xor part_0) || ... || (K xor part_k-1) || aes_gcm(K, frame)
    '''
    if not topic:
        raise InvalidTopicError("broadcast sealing needs at least one topic part")
    key = aes_key()
    slots = b"".join(xor_bytes(key, part) for part in topic)
    return slots + aes_encrypt(key, frame)

def _open_for_topic(envelope: Envelope, secret: bytes, topic_index: int) -> Optional[bytes]:
    count = len(envelope.topics)
    if not 0 <= topic_index < count:
        return None
    if len(envelope.data) < TOPIC_PART_SIZE * count:
        return None
    start = TOPIC_PART_SIZE * topic_index
    key = xor_bytes(secret, envelope.data[start:start + TOPIC_PART_SIZE])
    return aes_decrypt(key, envelope.data[TOPIC_PART_SIZE * count:])

def _parse_frame(frame: bytes) -> Optional[Tuple[bytes, Optional[PublicKey]]]:
    '''
    The function splits a decoded frame into payload and signer.
        Input: flags || payload [|| signature]
        Output: (payload, sender or None), or None for an empty frame or a
                signature that recovers to nothing
    A frame flagged as signed but too short to hold a signature is read as
    unsigned: everything after the flags byte is payload.
    '''
    if not frame:
        return None
    flags = frame[0]
    if flags & CONTAINS_SIGNATURE and len(frame) >= SIGNATURE_SIZE + 1:
        payload = bytes(frame[1:len(frame) - SIGNATURE_SIZE])
        sig = bytes(frame[len(frame) - SIGNATURE_SIZE:])
        sender = recover(sig, keccak256(payload))
        if sender is None:
            return None
        return payload, sender
    return bytes(frame[1:]), None
