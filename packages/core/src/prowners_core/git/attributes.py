"""Owner lookup through git attributes.

Owners are declared in .gitattributes, e.g.::

    *.py            owners=alice
    docs/**         owners=carol,docs-team@example.com

A .gitattributes value cannot contain whitespace, so commas separate owners
there; whitespace is still accepted for values that come from macros or other
attribute sources.
"""

from __future__ import annotations

import logging
import re

from prowners_core.errors import GitCommandError, QueryExecutionError
from prowners_core.git.snapshot import Snapshot

DEFAULT_ATTRIBUTE = "owners"

# check-attr reports these when no value is attached to the path.
_NO_VALUE = {"unspecified", "unset", "set", ""}

_TOKEN_SPLIT_RE = re.compile(r"[\s,]+")


def parse_check_attr(output: str, attribute: str) -> str | None:
    """Return the raw value of ``attribute`` from ``check-attr -z`` output, or None.

    The -z format is ``<path> NUL <attribute> NUL <info> NUL`` per result.
    """
    fields = output.split("\0")
    for i in range(0, len(fields) - 2, 3):
        _path, attr, info = fields[i : i + 3]
        if attr == attribute and info not in _NO_VALUE:
            return info
    return None


def split_owners(value: str | None) -> list[str]:
    if not value:
        return []
    # Bytes git could not decode become U+FFFD: such a token can never match an
    # account, but it must still be printable in logs and summaries.
    value = value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    return [token for token in _TOKEN_SPLIT_RE.split(value) if token]


class AttributeQueryClient:
    def __init__(self, attribute: str = DEFAULT_ATTRIBUTE, logger: logging.Logger | None = None):
        self.attribute = attribute
        self._log = logger or logging.getLogger(__name__)

    def owners_for(self, snapshot: Snapshot, path: str) -> list[str]:
        """Return the owner tokens declared for ``path`` in ``snapshot``, possibly empty.

        Raises QueryExecutionError when git itself fails.
        """
        try:
            output = snapshot.repository.run(
                "check-attr", "-z", "--cached", self.attribute, "--", path, env=snapshot.env
            )
        except GitCommandError as e:
            raise QueryExecutionError(f"check-attr failed for {path}: {e}") from e

        owners = split_owners(parse_check_attr(output, self.attribute))
        self._log.debug("Owners of %s: %s", path, owners or "none")
        return owners
