import os
from typing import Optional

from Crypto.Hash import keccak
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

CURVE = ec.SECP256K1()
SIGNATURE_SIZE = 65        # r(32) || s(32) || v(1)
NONCE_SIZE = 12            # AES-GCM nonce
TAG_SIZE = 16              # AES-GCM tag
EPHEMERAL_PUB_SIZE = 65    # uncompressed SEC1 point
ECIES_INFO = b"shh-ecies-v1"

PrivateKey = keys.PrivateKey
PublicKey = keys.PublicKey


def keccak256(data: bytes) -> bytes:
    ''' This function returns the 32-byte Keccak-256 digest of data '''
    return keccak.new(digest_bits=256, data=data).digest()

def leading_zero_bits(digest: bytes) -> int:
    '''
    The function counts the zero bits in front of the first set bit of a digest.
        Input: digest bytes (big-endian)
        Output: number of leading zero bits; 8 * len(digest) when all bits are zero
    '''
    return len(digest) * 8 - int.from_bytes(digest, "big").bit_length()

def xor_bytes(a: bytes, b: bytes) -> bytes:
    ''' This function XORs two equal-length byte strings '''
    if len(a) != len(b):
        raise ValueError(f"xor of {len(a)} and {len(b)} byte values")
    return bytes(x ^ y for x, y in zip(a, b))


def generate_private_key() -> PrivateKey:
    '''
    The function generates a fresh secp256k1 private key.
        Output: eth_keys PrivateKey object
    '''
    ec_key = ec.generate_private_key(CURVE)
    return keys.PrivateKey(ec_key.private_numbers().private_value.to_bytes(32, "big"))

def _to_ec_private(secret: PrivateKey) -> ec.EllipticCurvePrivateKey:
    return ec.derive_private_key(int.from_bytes(secret.to_bytes(), "big"), CURVE)

def _to_ec_public(pub: PublicKey) -> ec.EllipticCurvePublicKey:
    # eth_keys keeps the 64-byte X||Y form; SEC1 wants the 0x04 prefix
    return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, b"\x04" + pub.to_bytes())


def sign(secret: PrivateKey, msg_hash: bytes) -> bytes:
    '''
    This function signs a 32-byte hash with a recoverable ECDSA signature.
    Input:
        - secret: signer's private key
        - msg_hash: 32-byte digest to sign
    Output: 65-byte signature r || s || v
    '''
    return secret.sign_msg_hash(msg_hash).to_bytes()

def recover(signature: bytes, msg_hash: bytes) -> Optional[PublicKey]:
    '''
    This function recovers the signer's public key from a recoverable signature.
    Input:
        - signature: 65-byte r || s || v
        - msg_hash: the 32-byte digest that was signed
    Output: the signer's PublicKey, or None when the signature is malformed
    '''
    try:
        return keys.Signature(signature_bytes=signature).recover_public_key_from_msg_hash(msg_hash)
    except (BadSignature, ValidationError):
        return None


def _ecies_key(shared: bytes, ephemeral_pub: bytes) -> bytes:
    # bind the derived key to the ephemeral point
    return HKDF(algorithm=hashes.SHA256(), length=32, salt=ephemeral_pub, info=ECIES_INFO).derive(shared)

def encrypt(pub: PublicKey, plaintext: bytes) -> bytes:
    '''
    This function encrypts data for the holder of a public key (ECIES).
    An ephemeral secp256k1 key is agreed with the recipient over ECDH, the shared
    secret goes through HKDF-SHA256 and the result keys AES-256-GCM.
    Input:
        - pub: recipient's public key
        - plaintext: data to encrypt
    Output: ephemeral public point (65) || nonce (12) || ciphertext || tag (16)
    '''
    ephemeral = ec.generate_private_key(CURVE)
    shared = ephemeral.exchange(ec.ECDH(), _to_ec_public(pub))
    ephemeral_pub = ephemeral.public_key().public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint
    )
    nonce = os.urandom(NONCE_SIZE)
    ct = AESGCM(_ecies_key(shared, ephemeral_pub)).encrypt(nonce, plaintext, ephemeral_pub)
    return ephemeral_pub + nonce + ct

def decrypt(secret: PrivateKey, blob: bytes) -> bytes:
    '''
    This function reverses encrypt() with the recipient's private key.
    Input:
        - secret: recipient's private key
        - blob: output of encrypt()
    Output: plaintext bytes
    Raises ValueError on a short blob or an invalid point, and
    cryptography.exceptions.InvalidTag when the key or data do not match.
    '''
    if len(blob) < EPHEMERAL_PUB_SIZE + NONCE_SIZE + TAG_SIZE:
        raise ValueError("ciphertext too short")
    ephemeral_pub = blob[:EPHEMERAL_PUB_SIZE]
    nonce = blob[EPHEMERAL_PUB_SIZE:EPHEMERAL_PUB_SIZE + NONCE_SIZE]
    ct = blob[EPHEMERAL_PUB_SIZE + NONCE_SIZE:]
    peer = ec.EllipticCurvePublicKey.from_encoded_point(CURVE, ephemeral_pub)
    shared = _to_ec_private(secret).exchange(ec.ECDH(), peer)
    return AESGCM(_ecies_key(shared, ephemeral_pub)).decrypt(nonce, ct, ephemeral_pub)


def aes_key() -> bytes:
    '''This function generates a random 256-bit AES key'''
    return AESGCM.generate_key(bit_length=256)

def aes_encrypt(key: bytes, plaintext: bytes) -> bytes:
    '''
    This function encrypts plaintext using AES-GCM.
    Input:
        - key: AES key in bytes (256 bits)
        - plaintext: data to encrypt in bytes
    Output: nonce (12) || ciphertext || tag (16)
    '''
    nonce = os.urandom(NONCE_SIZE)  # random 96-bit nonce
    return nonce + AESGCM(key).encrypt(nonce, plaintext, None)

def aes_decrypt(key: bytes, blob: bytes) -> bytes:
    '''
    This function decrypts the output of aes_encrypt().
    Input:
        - key: AES key in bytes (256 bits)
        - blob: nonce || ciphertext || tag
    Output: decrypted plaintext in bytes
    '''
    if len(blob) < NONCE_SIZE + TAG_SIZE:
        raise ValueError("ciphertext too short")
    return AESGCM(key).decrypt(blob[:NONCE_SIZE], blob[NONCE_SIZE:], None)
