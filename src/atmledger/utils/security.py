"""PIN hashing."""

from passlib.context import CryptContext

# pbkdf2_sha256 is implemented inside passlib itself, so no native backend
# is needed.
pin_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_pin(pin: str) -> str:
    """Return a salted one-way hash of ``pin``."""
    return pin_context.hash(pin)


def verify_pin(pin: str, pin_hash: str) -> bool:
    """Check ``pin`` against a stored hash."""
    if not pin or not pin_hash:
        return False
    return pin_context.verify(pin, pin_hash)
