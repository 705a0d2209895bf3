"""Password hashing and verification."""

import binascii
import hashlib
import secrets
from base64 import b64encode, b64decode

SALT_BYTES = 16
DIGEST = 'sha256'
DIGEST_BYTES = hashlib.new(DIGEST).digest_size
ITERATIONS = 260000


def _hash_salt_and_password(salt: bytes, password: str,
                            iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(DIGEST, password.encode('utf-8'), salt,
                               iterations)


def hash_password(password: str, iterations: int = ITERATIONS) -> str:
    """
    Generate a secure hash of a password.

    A fresh salt is generated on every call and stored in front of the
    digest, so the result is all that is needed to check the password later.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    hashed = _hash_salt_and_password(salt, password, iterations)
    return b64encode(salt + hashed).decode('ascii')


def check_password(password: str, encrypted: str,
                   iterations: int = ITERATIONS) -> bool:
    """
    Check a password against an encrypted hash.

    Malformed hashes never match.
    """
    try:
        decoded = b64decode(encrypted, validate=True)
    except (binascii.Error, ValueError, TypeError):
        return False
    if len(decoded) != SALT_BYTES + DIGEST_BYTES:
        return False
    salt = decoded[:SALT_BYTES]
    enc_hashed = decoded[SALT_BYTES:]
    pass_hashed = _hash_salt_and_password(salt, password, iterations)
    return secrets.compare_digest(pass_hashed, enc_hashed)
