"""Owner token → user account resolution."""

from __future__ import annotations

import logging

from prowners_core.errors import IdentityLookupError, IdentityNotFound
from prowners_core.host import NullSecurityScope, SecurityScope, UserDirectory
from prowners_core.models import User


class IdentityResolver:
    """Resolves owner tokens (account names or emails) to users.

    Each lookup runs in its own elevated scope; the scope is never held across
    lookups. Resolution never raises: a token that cannot be resolved, for any
    reason, comes back as None.
    """

    def __init__(
        self,
        directory: UserDirectory,
        security: SecurityScope | None = None,
        logger: logging.Logger | None = None,
    ):
        self._directory = directory
        self._security = security or NullSecurityScope()
        self._log = logger or logging.getLogger(__name__)

    def resolve(self, token: str) -> User | None:
        try:
            return self._security.run_with_elevated_scope(
                lambda: self._directory.find_user_by_name_or_email(token),
                reason="Find user",
            )
        except IdentityNotFound:
            return None
        except Exception as e:
            error = IdentityLookupError(f"Lookup of {token!r} failed: {e}")
            self._log.error("%s", error)
            return None
