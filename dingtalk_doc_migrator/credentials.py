"""Cookie credential lookup for DingTalk requests."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .config_loader import get_nested

logger = logging.getLogger('dingtalk_doc_migrator.credentials')

COOKIE_ENV_VAR = 'DINGTALK_COOKIE'


class CredentialError(Exception):
    """Raised when no DingTalk cookie can be found."""
    pass


class CookieProvider:
    """
    Supplies the cookie header value for a call.

    Lookup order: explicitly provided value, ``dingtalk.cookie`` from the
    configuration, the ``DINGTALK_COOKIE`` environment variable, then the
    contents of ``dingtalk.cookie_file``. Cookies are not validated or
    refreshed here.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    def get_cookie(self, provided: Optional[str] = None) -> str:
        """
        Return the first non-blank cookie from the configured sources.

        Raises:
            CredentialError: If every source is empty
        """
        if provided and provided.strip():
            logger.info("Using explicitly provided cookie")
            return provided.strip()

        configured = get_nested(self.config, 'dingtalk.cookie')
        if isinstance(configured, str) and configured.strip() and '${' not in configured:
            logger.info("Using cookie from configuration")
            return configured.strip()

        env_cookie = os.getenv(COOKIE_ENV_VAR)
        if env_cookie and env_cookie.strip():
            logger.info(f"Using cookie from {COOKIE_ENV_VAR}")
            return env_cookie.strip()

        cookie_file = get_nested(self.config, 'dingtalk.cookie_file')
        if cookie_file:
            file_cookie = self._read_cookie_file(Path(cookie_file).expanduser())
            if file_cookie:
                logger.info(f"Using cookie from file {cookie_file}")
                return file_cookie

        raise CredentialError(
            "No DingTalk cookie available. Provide one of:\n"
            "  - the --cookie command line option\n"
            "  - dingtalk.cookie in the configuration file\n"
            f"  - the {COOKIE_ENV_VAR} environment variable\n"
            "  - dingtalk.cookie_file pointing at a file containing the cookie\n"
            "Copy the Cookie request header from a logged-in browser session "
            "on https://alidocs.dingtalk.com (developer tools, Network tab)."
        )

    @staticmethod
    def _read_cookie_file(path: Path) -> Optional[str]:
        if not path.is_file():
            logger.warning(f"Cookie file not found: {path}")
            return None
        content = path.read_text(encoding='utf-8').strip()
        return content or None


__all__ = ['CookieProvider', 'CredentialError', 'COOKIE_ENV_VAR']
