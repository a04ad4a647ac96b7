from functools import lru_cache

from passlib.context import CryptContext

DEFAULT_BCRYPT_ROUNDS = 10

# Bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def build_crypt_context(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> CryptContext:
    return CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=rounds)


bcrypt_context = build_crypt_context()


def _truncate(password: str) -> str:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES].decode('utf-8', errors='ignore')


def get_password_hash(password: str, context: CryptContext = bcrypt_context) -> str:
    return context.hash(_truncate(password))


def verify_password(plain_password: str, hashed_password: str, context: CryptContext = bcrypt_context) -> bool:
    """
    Check a plaintext password against a stored bcrypt hash.

    A malformed or unrecognised hash counts as a mismatch rather than an error.
    """
    if not hashed_password:
        return False
    try:
        return context.verify(_truncate(plain_password), hashed_password)
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=None)
def get_dummy_hash(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """
    Hash of a throwaway password, checked when there is no account to check.

    Verifying against it costs the same as a real check, so a login for an
    unknown email takes as long as one with a wrong password.
    """
    return get_password_hash("no-such-account", build_crypt_context(rounds))
