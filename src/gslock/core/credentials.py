"""Credential loading and storage client construction for gslock."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from gslock.core.constants import CREDENTIALS_ENV_VAR
from gslock.core.exceptions import AuthError


def bootstrap_dotenv(logger: logging.Logger, dotenv_path: Path | None = None) -> bool:
    """Load a .env file into the environment without overriding real variables.

    Without an explicit path the .env file is searched for from the current
    working directory upward, so jobs pick up the .env next to where they run.

    Returns:
        True if a .env file was found and loaded
    """
    try:
        loaded = load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True), override=False)
    except OSError as e:
        logger.debug(f"Failed to load .env: {e}")
        return False
    if loaded:
        logger.debug(".env file found and loaded")
    else:
        logger.debug(".env file not found")
    return loaded


def resolve_credentials_file(credentials_file: Path | None) -> Path | None:
    """Validate an explicit service account file.

    Args:
        credentials_file: Path taken from GOOGLE_APPLICATION_CREDENTIALS, or None

    Returns:
        The path if one was given, None to use ambient credentials

    Raises:
        AuthError: If a path was given but is not a readable JSON object
    """
    if credentials_file is None:
        return None

    if not credentials_file.is_file():
        raise AuthError(
            "Service account file not found",
            source=CREDENTIALS_ENV_VAR,
            details=str(credentials_file),
        )
    try:
        with open(credentials_file, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise AuthError(
            "Service account file is not valid JSON",
            source=CREDENTIALS_ENV_VAR,
            details=f"{credentials_file}: {e}",
        ) from e
    if not isinstance(data, dict):
        raise AuthError(
            "Service account file must contain a JSON object",
            source=CREDENTIALS_ENV_VAR,
            details=str(credentials_file),
        )
    return credentials_file


def create_storage_client(credentials_file: Path | None, logger: logging.Logger | None = None) -> storage.Client:
    """Build an authenticated Cloud Storage client.

    Uses the service account file when one is configured, otherwise the
    library's default credential discovery (gcloud ADC, metadata server).

    Raises:
        AuthError: If no usable credentials can be found
    """
    logger = logger or logging.getLogger(__name__)
    path = resolve_credentials_file(credentials_file)
    try:
        if path is not None:
            logger.debug(f"Using service account file: {path}")
            return storage.Client.from_service_account_json(str(path))
        logger.debug("Using default application credentials")
        return storage.Client()
    except (GoogleAuthError, ValueError, KeyError, OSError) as e:
        raise AuthError(
            "Failed to create storage client",
            source=CREDENTIALS_ENV_VAR if path is not None else "default credentials",
            details=str(e),
        ) from e
