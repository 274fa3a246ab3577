"""Credential service — digest computation and random secret generation.

Digests are unsalted SHA-256 hex strings, matching the digests already held
by the credential store. This is kept for compatibility only; a salted,
memory-hard scheme verified server-side is the intended replacement.
"""

from passlib.context import CryptContext
from passlib.pwd import genword

from portal.config import get_settings

settings = get_settings()
pwd_context = CryptContext(schemes=["hex_sha256"])

SECRET_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789"
    "!@#$%^&*"
)


def hash_secret(secret: str) -> str:
    """Return the 64-char lowercase hex SHA-256 digest of ``secret``."""
    return pwd_context.hash(secret)


def verify_secret(secret: str, digest: str) -> bool:
    if not digest:
        return False
    try:
        return pwd_context.verify(secret, digest.lower())
    except ValueError:
        # stored value is not a hex digest
        return False


def generate_secret(length: int = settings.GENERATED_PASSWORD_LENGTH) -> str:
    return genword(length=length, chars=SECRET_ALPHABET)
