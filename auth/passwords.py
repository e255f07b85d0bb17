"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly rather than through passlib[bcrypt]: passlib's
internal wrap-bug detection builds a password longer than 72 bytes, which
bcrypt 4.x rejects with an explicit error.

The cost factor is bcrypt.gensalt()'s default (12 rounds) and is the same
for every hash. checkpw() compares in constant time.
"""

from __future__ import annotations

import bcrypt

# bcrypt only reads this many bytes of input. Longer passwords are refused
# outright so two different passwords can never share a hash.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises ValueError if the UTF-8 encoding exceeds MAX_PASSWORD_BYTES. The
    API layer rejects such passwords with 400 before they get here.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password exceeds {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        # Could never have been hashed; still pay for one comparison.
        bcrypt.checkpw(b"", DUMMY_HASH.encode("utf-8"))
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        # Corrupt or non-bcrypt hash in the store.
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. CredentialStore.verify() checks against this
# hash when the username does not exist, so an unknown username costs the
# same bcrypt work as a wrong password.
DUMMY_HASH: str = hash_password("cms_timing_dummy")
