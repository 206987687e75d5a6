import json

from cryptography.fernet import Fernet

from app.config import get_settings


def get_fernet() -> Fernet:
    settings = get_settings()
    return Fernet(settings.FERNET_KEY.encode() if isinstance(settings.FERNET_KEY, str) else settings.FERNET_KEY)


def seal_claims(claims: dict) -> str:
    """Encrypt a claims dict into a URL-safe Fernet token string."""
    f = get_fernet()
    json_bytes = json.dumps(claims, separators=(",", ":")).encode("utf-8")
    return f.encrypt(json_bytes).decode("ascii")


def open_claims(token: str, ttl_seconds: int | None = None) -> dict:
    """Decrypt a token produced by ``seal_claims``.

    Raises ``cryptography.fernet.InvalidToken`` when the token is malformed,
    tampered with, or older than ``ttl_seconds``.
    """
    f = get_fernet()
    decrypted = f.decrypt(token.encode("ascii"), ttl=ttl_seconds)
    return json.loads(decrypted.decode("utf-8"))
