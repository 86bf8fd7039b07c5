"""Text helpers shared by the detectors.

Detection never parses manifests structurally: content is read as text and
scanned for marker substrings, so malformed files simply contribute no signal.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from adk_inspector.logging import get_logger

log = get_logger(__name__)

_QUOTED = re.compile(r'"([^"]*)"')


def read_text(path: Path) -> str | None:
    """Return the UTF-8 text of *path*, or None when it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.debug("unreadable file %s: %s", path, exc)
        return None


def contains_any(content: str, markers: Iterable[str]) -> bool:
    return any(m in content for m in markers)


def matching_markers(content: str, markers: Iterable[str]) -> list[str]:
    return [m for m in markers if m in content]


def _shorthand_pattern(name: str) -> re.Pattern[str]:
    # `google-adk = "1.0.0"` carries no `version` key
    return re.compile(rf'^\s*"?{re.escape(name)}"?\s*=\s*"(\d[^"]*)"')


def extract_version(content: str, names: Iterable[str]) -> str | None:
    """Return the first version literal found next to one of *names*.

    A line qualifies when it mentions a dependency name and the token
    ``version``; its first quoted value starting with a digit is the version.
    A TOML shorthand line (``name = "1.2.3"``) qualifies as well. Lines are
    examined in order and the first hit wins.
    """
    names = tuple(names)
    shorthands = [_shorthand_pattern(n) for n in names]
    for line in content.splitlines():
        if not any(n in line for n in names):
            continue
        if "version" in line:
            for value in _QUOTED.findall(line):
                if value[:1].isdigit():
                    return value
        for pattern in shorthands:
            m = pattern.match(line)
            if m:
                return m.group(1)
    return None


def extract_pinned_requirement(content: str, names: Iterable[str]) -> str | None:
    """Return the version of the first ``name==X`` pin among *names*."""
    patterns = [
        re.compile(rf"^\s*{re.escape(n)}\s*(?:\[[^\]]*\])?\s*==\s*(\d[^\s;#,]*)") for n in names
    ]
    for line in content.splitlines():
        for pattern in patterns:
            m = pattern.match(line)
            if m:
                return m.group(1)
    return None
