"""
Password hashing for stored user credentials.

The ledger core treats a password as an opaque credential: it is never
validated or returned. It is still never stored in plaintext. passlib's
CryptContext hashes it with Argon2id, which is memory-hard as well as
time-hard and so resists GPU brute-forcing.

If the scheme ever changes, passlib verifies old hashes with the original
scheme while new passwords use the new one ("deprecated='auto'").
"""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Returns:
        An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").
    """
    return pwd_context.hash(plain_password)
