"""GitHub token resolution with gh CLI fallback.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (Actions injects it; explicit override)
  2. `gh auth token` (the local GitHub CLI session)

The elevated lookup token (PROWNERS_ADMIN_TOKEN) is environment-only and is
read by prowners_core.config.load_config.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_GH_TIMEOUT = 5


def _token_from_gh_cli() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        logger.debug("gh CLI unavailable; no fallback token.")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no source is available. Never raises."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    token = _token_from_gh_cli()
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token
