import rlp
from rlp.exceptions import RLPException
from rlp.sedes import Binary, CountableList, List, big_endian_int, binary

from shh.errors import MalformedEnvelopeError

TOPIC_SEDES = CountableList(Binary.fixed_length(4))

# [expiry, ttl, topics, data, nonce]
ENVELOPE_SEDES = List([big_endian_int, big_endian_int, TOPIC_SEDES, binary, big_endian_int])
# the same record minus the nonce; this is what proof-of-work commits to
WITHOUT_NONCE_SEDES = List([big_endian_int, big_endian_int, TOPIC_SEDES, binary])


def pack_envelope(expiry: int, ttl: int, topics, data: bytes, nonce: int) -> bytes:
    '''
    The function encodes the five envelope fields as an RLP list.
        Output: wire bytes handed to the transport
    '''
    return rlp.encode([expiry, ttl, list(topics), data, nonce], sedes=ENVELOPE_SEDES)

def pack_without_nonce(expiry: int, ttl: int, topics, data: bytes) -> bytes:
    ''' The function encodes the envelope fields that proof-of-work covers '''
    return rlp.encode([expiry, ttl, list(topics), data], sedes=WITHOUT_NONCE_SEDES)

def unpack_envelope(raw: bytes):
    '''
    The function decodes wire bytes into the five envelope fields.
    Fields are returned verbatim; nothing is cross-checked here.
        Input: RLP bytes
        Output: tuple (expiry, ttl, topics, data, nonce)
    Raises MalformedEnvelopeError when the bytes are not such a record.
    '''
    try:
        expiry, ttl, topics, data, nonce = rlp.decode(raw, sedes=ENVELOPE_SEDES)
    except RLPException as e:
        raise MalformedEnvelopeError(f"not an envelope: {e}") from e
    return expiry, ttl, list(topics), data, nonce
