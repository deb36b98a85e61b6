"""Local secret store for the LLM credential.

The key is read from a dotenv-format secrets file kept out of version
control (see secrets.sample.env). As a fallback the app metadata (process
environment by default) is checked under the current and the legacy key
names.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

SECRET_KEY_NAME = "OPENAI_API_KEY"
LEGACY_KEY_NAMES = ("OPENAI_API_KEY", "OpenAIAPIKey")


def mask_secret(value: Optional[str]) -> Optional[str]:
    """Mask a secret for logging ("sk-a...wxyz")."""
    if not value:
        return None
    if len(value) > 8:
        return value[:4] + "..." + value[-4:]
    return "***"


class SecretStore:
    """
    Resolve the LLM API key.

    Resolution order:
    1. secrets file, key OPENAI_API_KEY
    2. app metadata, key OPENAI_API_KEY
    3. app metadata, legacy key OpenAIAPIKey

    Empty values count as absent. The file is read on every call so a key
    added at runtime is picked up without a restart.

    Example:
        >>> store = SecretStore("secrets.env")
        >>> store.resolve_api_key()
        'sk-...'
    """

    def __init__(
        self,
        secrets_file: Union[str, Path, None] = "secrets.env",
        metadata: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize secret store.

        Args:
            secrets_file: Path of the dotenv secrets file (None disables it)
            metadata: Fallback key/value source (default: os.environ)
        """
        self._secrets_file = Path(secrets_file) if secrets_file else None
        self._metadata = metadata

    def _from_file(self) -> Optional[str]:
        if self._secrets_file is None or not self._secrets_file.is_file():
            return None
        values = dotenv_values(self._secrets_file)
        key = values.get(SECRET_KEY_NAME)
        return key.strip() if key and key.strip() else None

    def _from_metadata(self) -> Optional[str]:
        metadata = self._metadata if self._metadata is not None else os.environ
        for name in LEGACY_KEY_NAMES:
            key = metadata.get(name)
            if key and key.strip():
                return key.strip()
        return None

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key, or None when no source provides one."""
        key = self._from_file()
        source = "secrets_file"
        if key is None:
            key = self._from_metadata()
            source = "app_metadata"

        if key is None:
            logger.debug(
                "No API key found",
                extra={"secrets_file": str(self._secrets_file)},
            )
            return None

        logger.debug(
            "API key resolved",
            extra={"source": source, "key_masked": mask_secret(key)},
        )
        return key
