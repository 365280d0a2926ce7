"""
Configuration and logging setup for the Planka MCP server.

Settings come from the process environment, optionally seeded from a .env
file in the project root. Variables already set in the environment win over
the file.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from planka_errors import PlankaConfigError

# Determine project root (directory containing this script)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
DOTENV_PATH = os.path.join(PROJECT_ROOT, '.env')

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_LEVEL = 'INFO'

logger = logging.getLogger('planka_config')


@dataclass(frozen=True)
class Settings:
    """Validated startup configuration."""

    base_url: str
    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @property
    def uses_static_token(self) -> bool:
        return self.token is not None


def _get(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_config(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read PLANKA_* settings and fail fast on anything missing.

    Args:
        env: Mapping to read from. Defaults to os.environ after loading
            the project's .env file.

    Raises:
        PlankaConfigError: if the URL or credentials are missing or invalid.
    """
    if env is None:
        load_dotenv(DOTENV_PATH)
        env = os.environ

    base_url = _get(env, 'PLANKA_URL')
    if not base_url:
        logger.error("PLANKA_URL environment variable not set")
        raise PlankaConfigError("PLANKA_URL not set")

    parsed = urlparse(base_url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        logger.error(f"Invalid PLANKA_URL format: {base_url}")
        raise PlankaConfigError(f"Invalid PLANKA_URL: {base_url}")

    token = _get(env, 'PLANKA_TOKEN')
    if token:
        logger.debug("Using token-based authentication")
        return Settings(base_url=base_url, token=token)

    logger.debug("Using email/password authentication")
    email = _get(env, 'PLANKA_EMAIL')
    if not email:
        logger.error("Neither PLANKA_TOKEN nor PLANKA_EMAIL is set")
        raise PlankaConfigError("PLANKA_TOKEN or PLANKA_EMAIL must be set")

    password = env.get('PLANKA_PASSWORD')
    if not password:
        logger.error("PLANKA_PASSWORD not set but PLANKA_EMAIL is configured")
        raise PlankaConfigError("PLANKA_PASSWORD must be set when using PLANKA_EMAIL")

    return Settings(base_url=base_url, email=email, password=password)


def setup_logging(env: Optional[Mapping[str, str]] = None) -> None:
    """Send logs to stderr (and optionally a file), never to stdout.

    stdout carries the JSON-RPC stream, so a single stray log line there
    breaks the client.
    """
    if env is None:
        env = os.environ

    level_name = (_get(env, 'PLANKA_MCP_LOG_LEVEL') or DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, level_name, None)
    unknown_level = not isinstance(level, int)
    if unknown_level:
        level = logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    log_file = _get(env, 'PLANKA_MCP_LOG_FILE')
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    if unknown_level:
        logger.warning(f"Unknown PLANKA_MCP_LOG_LEVEL {level_name!r}, using INFO")
