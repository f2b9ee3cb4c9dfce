"""Correction tables: ordered pattern → replacement substitutions.

Replacements use JavaScript replacement syntax:
`$1`..`$99` insert a group, `$&` the whole match, `$$` a literal dollar sign.
Everything else in a replacement is literal text.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from importlib import resources
from pathlib import Path

logger = logging.getLogger(__name__)

FLAGS = re.IGNORECASE | re.MULTILINE


class ConfigurationError(Exception):
    """Invalid correction table entry or table file."""

    def __init__(self, msg: str, pattern: str = ""):
        self.msg: str = msg
        self.pattern: str = pattern
        super().__init__(msg)

    def __str__(self) -> str:
        if self.pattern:
            return "bad correction " + repr(self.pattern) + ": " + self.msg
        return self.msg


def _to_template(replacement: str, groups: int, pattern: str) -> str:
    """Translate a JavaScript-style replacement into an re.sub template."""
    out: list[str] = []
    i = 0
    while i < len(replacement):
        c = replacement[i]
        if c == "\\":
            out.append("\\\\")
            i += 1
            continue
        if c != "$" or i + 1 >= len(replacement):
            out.append(c)
            i += 1
            continue
        nxt = replacement[i + 1]
        if nxt == "$":
            out.append("$")
            i += 2
        elif nxt == "&":
            out.append("\\g<0>")
            i += 2
        elif nxt.isdigit():
            j = i + 1
            while j < len(replacement) and j < i + 3 and replacement[j].isdigit():
                j += 1
            n = int(replacement[i + 1 : j])
            if n == 0 or n > groups:
                raise ConfigurationError(
                    "replacement refers to group " + str(n) + " of " + str(groups),
                    pattern,
                )
            out.append("\\g<" + str(n) + ">")
            i = j
        else:
            out.append(c)
            i += 1
    return "".join(out)


class CorrectionTable:
    """Compiled, validated correction table. Iteration preserves table order."""

    def __init__(self, entries: Mapping[str, str]) -> None:
        self.entries: list[tuple[re.Pattern[str], str]] = []
        for pattern, replacement in entries.items():
            if not isinstance(pattern, str) or not isinstance(replacement, str):
                raise ConfigurationError(
                    "pattern and replacement must be strings", str(pattern)
                )
            try:
                compiled = re.compile(pattern, FLAGS)
            except re.error as e:
                raise ConfigurationError(str(e), pattern) from e
            template = _to_template(replacement, compiled.groups, pattern)
            self.entries.append((compiled, template))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[tuple[re.Pattern[str], str]]:
        return iter(self.entries)

    def apply(self, code: str) -> str:
        """Apply every entry in order as a global substitution."""
        for pattern, template in self.entries:
            code, count = pattern.subn(template, code)
            if count:
                logger.debug("correction %r applied %d times", pattern.pattern, count)
        return code


def _check_mapping(data: object, source: str) -> Mapping[str, str]:
    if not isinstance(data, dict):
        raise ConfigurationError(source + ": correction table must be a JSON object")
    return data


def load_corrections(path: str | Path) -> CorrectionTable:
    """Load a correction table from a JSON object file (order preserved)."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError("cannot read '" + str(path) + "': " + str(e)) from e
    except ValueError as e:
        raise ConfigurationError("invalid JSON in '" + str(path) + "': " + str(e)) from e
    table = CorrectionTable(_check_mapping(data, str(path)))
    logger.debug("loaded %d corrections from %s", len(table), path)
    return table


def default_corrections(target: str = "ruby") -> CorrectionTable:
    """Load the correction table packaged with the backend for target."""
    name = target + ".json"
    data = resources.files("jsrb.backend").joinpath("data")
    text = data.joinpath(name).read_text("utf-8")
    return CorrectionTable(_check_mapping(json.loads(text), name))


def as_table(corrections: CorrectionTable | Mapping[str, str] | None) -> CorrectionTable:
    """Normalize an injected table argument; None selects the Ruby default."""
    if corrections is None:
        return default_corrections()
    if isinstance(corrections, CorrectionTable):
        return corrections
    return CorrectionTable(corrections)
