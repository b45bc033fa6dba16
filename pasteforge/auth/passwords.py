"""
Password storage.

Records are stored and compared in plaintext unless ``auth.hash_passwords``
is switched on, in which case new passwords are bcrypt-hashed. Checking
accepts both forms so switching does not lock out existing users.
"""

import hmac

import bcrypt


BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def is_bcrypt_hash(value: str) -> bool:
    return len(value) == 60 and value.startswith(BCRYPT_PREFIXES)


def encode_for_storage(password: str, hash_passwords: bool) -> str:
    return hash_password(password) if hash_passwords else password


def check_password(supplied: str, stored: str) -> bool:
    """Compare a supplied password against the stored value"""
    if not stored:
        return False
    if is_bcrypt_hash(stored):
        try:
            return bcrypt.checkpw(supplied.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            return False
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))
