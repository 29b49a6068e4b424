"""PII handling utilities: no raw user identifiers or message text in logs.

User identifiers are hashed with a secret salt before they reach a log line.
Message text is only ever logged as an unsalted fingerprint plus its length.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)

MIN_SALT_LENGTH = 32

_PII_SALT: Optional[str] = None


def configure_pii_salt(salt: str) -> None:
    """Configure the PII hashing salt.

    Must be called during application startup before any PII hashing.

    Args:
        salt: Secret salt value (PII_HASH_SALT in the environment)

    Raises:
        ValueError: If salt is empty or shorter than 32 characters
    """
    global _PII_SALT
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "PII_SALT_CONFIGURATION_FAILED",
            extra={"reason": "Salt too short or empty", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _PII_SALT = salt
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def hash_pii(value: Optional[str]) -> Optional[str]:
    """Hash a user identifier for safe logging.

    Anonymous requests (no user id) stay None so log lines can still tell
    them apart from identified users.

    Args:
        value: User id, session id or email

    Returns:
        64-char hex digest, or None when value is None

    Raises:
        RuntimeError: If the PII salt has not been configured
    """
    if value is None:
        return None
    if _PII_SALT is None:
        logger.critical(
            "PII_HASH_FAILED",
            extra={"reason": "Salt not configured", "action": "call configure_pii_salt()"}
        )
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    salted = f"{_PII_SALT}{value}"
    return hashlib.sha256(salted.encode()).hexdigest()


def hash_text_for_audit(text: str) -> str:
    """Fingerprint message text without exposing its content."""
    return hashlib.sha256((text or "").encode()).hexdigest()
