import bcrypt

from planitech.core.config import settings


def hash_password(password: str) -> str:
    """Hash bcrypt (sel inclus) stocké tel quel en base."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # hash illisible en base (format inconnu)
        return False
