# where: wordpress/provider/provider.py
# what: Validates WordPress credentials entered in the Dify console.
# why: Prevents misconfigured plugins from calling the WordPress REST API with a bad base URL or auth mode.

from __future__ import annotations

import logging
from typing import Any

from dify_plugin import ToolProvider
from dify_plugin.errors.tool import ToolProviderCredentialValidationError

from tools.credentials import validate_credentials

logger = logging.getLogger(__name__)


class WordPressProvider(ToolProvider):
    def _validate_credentials(self, credentials: dict[str, Any]) -> None:
        """Validate WordPress credentials supplied from the Dify console."""
        try:
            parsed = validate_credentials(credentials)
        except ValueError as exc:
            raise ToolProviderCredentialValidationError(str(exc)) from exc

        logger.info(
            "WordPress credentials passed basic validation checks (authentication=%s)",
            parsed.authentication,
        )
