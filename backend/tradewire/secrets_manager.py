"""
Secrets Management for Tradewire.

Provides:
- Centralized, cached access to secrets in the environment
- Per-environment required secret lists
- Weak value and key reuse warnings
- Secret masking for logs
"""

import logging
import os
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from tradewire.config import Settings, settings

logger = logging.getLogger(__name__)

GOOGLE_SECRETS = ["GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET"]
SIGNING_SECRETS = ["JWT_SECRET_KEY", "ENCRYPTION_KEY"]


class SecretsManager:
    """Reads secrets from the environment or loaded settings and checks them at startup."""

    REQUIRED_SECRETS: Dict[str, List[str]] = {
        # Settings generates throwaway keys when these are unset
        "development": [],
        "test": [],
        "staging": SIGNING_SECRETS + ["DATABASE_URL"] + GOOGLE_SECRETS,
        "production": SIGNING_SECRETS + ["DATABASE_URL"] + GOOGLE_SECRETS + ["GOOGLE_REDIRECT_URI"],
    }

    WEAK_VALUES = {"secret", "changeme", "password", "development", "test", "12345"}
    MIN_KEY_LENGTH = 32

    def __init__(self, settings: Optional[Settings] = None):
        self._cache: Dict[str, str] = {}
        self._settings = settings

    def get_secret(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return a secret, caching the first non-empty read.

        The process environment wins; otherwise a value that ``Settings``
        loaded explicitly (from the environment or ``.env``) is used.
        Defaults and generated development keys do not count as set.
        """
        if key in self._cache:
            return self._cache[key]

        value = os.getenv(key)
        if not value and self._settings is not None:
            field = key.lower()
            if field in self._settings.model_fields_set:
                value = str(getattr(self._settings, field) or "")
        if not value:
            return default
        self._cache[key] = value
        return value

    def validate_required_secrets(self, environment: str) -> Tuple[bool, List[str]]:
        """Check that every secret required for ``environment`` is set.

        Unknown environments are held to the production list. Weak values,
        a reused signing key and a plain-http redirect URI only warn.

        Returns:
            Tuple of (is_valid, missing_secrets)
        """
        required = self.REQUIRED_SECRETS.get(environment, self.REQUIRED_SECRETS["production"])
        missing = [key for key in required if not self.get_secret(key)]

        for key in SIGNING_SECRETS:
            value = self.get_secret(key)
            if value and key in required and self._is_weak_secret(value):
                logger.warning(f"Secret {key} appears to be a weak/default value")

        if required and self._signing_keys_reused():
            logger.warning("JWT_SECRET_KEY and ENCRYPTION_KEY are identical; use separate keys")

        redirect_uri = self.get_secret("GOOGLE_REDIRECT_URI")
        if "GOOGLE_REDIRECT_URI" in required and redirect_uri and not redirect_uri.startswith("https://"):
            logger.warning(f"GOOGLE_REDIRECT_URI is not https: {redirect_uri}")

        return not missing, missing

    def _is_weak_secret(self, value: str) -> bool:
        return len(value) < self.MIN_KEY_LENGTH or value.lower() in self.WEAK_VALUES

    def _signing_keys_reused(self) -> bool:
        jwt_key, encryption_key = (self.get_secret(key) for key in SIGNING_SECRETS)
        return bool(jwt_key) and jwt_key == encryption_key

    @staticmethod
    def mask_secret(value: str, visible_chars: int = 4) -> str:
        """Mask a secret value for safe logging, e.g. '****xyz'."""
        if not value or len(value) <= visible_chars:
            return "****"
        return "*" * (len(value) - visible_chars) + value[-visible_chars:]

    def clear_cache(self) -> None:
        self._cache.clear()


@lru_cache()
def get_secrets_manager() -> SecretsManager:
    return SecretsManager(settings)
