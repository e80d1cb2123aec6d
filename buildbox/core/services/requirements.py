"""
Requirements locker — pins requirement names against the lock table.

The lock table maps a name to its version specifier with the operator
included (``"==2.31.0"``), so a pinned line is just the two strings
concatenated.  Output is sorted so the same closure always renders the
same bytes, whatever order the names were discovered in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from buildbox.core.errors import UnlockedRequirement

logger = logging.getLogger(__name__)

REQUIREMENTS_FILE = "requirements.txt"


def lock_requirements(names: Iterable[str], lock_table: Mapping[str, str]) -> list[str]:
    """Pin every name and return the sorted specifier lines.

    Raises:
        UnlockedRequirement: A name is missing from ``lock_table``.
            With several missing, the first in sorted order is reported.
    """
    locked = []
    for name in sorted(set(names)):
        version = lock_table.get(name)
        if version is None:
            raise UnlockedRequirement(name)
        locked.append(f"{name}{version}")

    locked.sort()
    return locked


def render_requirements(names: Iterable[str], lock_table: Mapping[str, str]) -> str:
    """Render the requirements file content: one pinned line per entry.

    Lines are joined with ``\\n`` and there is no trailing newline, so
    ``{"a", "b"}`` renders as ``"a==1.0\\nb==2.0"``.
    """
    lines = lock_requirements(names, lock_table)
    logger.debug("Locked %d requirements", len(lines))
    return "\n".join(lines)
