"""
Authentication module for the Run Command Service.

Compares the x-secret header against the configured shared secret.
"""

import logging
import secrets
from typing import Optional

logger = logging.getLogger(__name__)


class SecretAuthModule:
    """Validates requests carrying the shared execute secret."""

    def __init__(self, execute_secret: str):
        """
        Initialize auth module.

        Args:
            execute_secret: Secret every trigger must present
        """
        if not execute_secret:
            raise ValueError("execute_secret must not be empty")
        self._secret = execute_secret

    def verify_secret(self, secret: Optional[str]) -> bool:
        """
        Verify a presented secret.

        Args:
            secret: Value of the x-secret header (None when absent)

        Returns:
            True if it matches the configured secret
        """
        if not secret:
            logger.warning("Rejected request without x-secret header")
            return False

        # Use constant-time comparison for security
        if secrets.compare_digest(secret.encode("utf-8"), self._secret.encode("utf-8")):
            return True

        logger.warning("Rejected request with invalid x-secret header")
        return False
