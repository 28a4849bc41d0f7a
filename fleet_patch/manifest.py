"""Requirements manifest lookup and rewriting.

Works on the raw text of a line-oriented manifest (requirements.txt style)
so that comments, ordering, blank lines and line endings survive untouched.
Only the pin of the targeted package is changed, and every rewrite is
re-scanned before it is accepted.
"""

from __future__ import annotations

import re

from .errors import RewriteVerificationFailed
from .models import ManifestEntry

# Operator, version token, then any further comma-separated clauses
# ("==1.0,<2"), which belong to the same version expression.
_PIN = re.compile(
    r"\s*(?P<op>===|==|=)\s*(?P<version>[^\s;#,=][^\s;#,]*)(?:\s*,\s*[^\s;#,]+)*"
)


def _split_ending(line: str) -> tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def _content(body: str) -> str:
    """Drop leading whitespace and a UTF-8 byte-order mark."""
    return body.lstrip().lstrip("\ufeff").lstrip()


def _match_line(line: str, name: str) -> re.Match[str] | None:
    """Match the pin following `name` on a line, if the line belongs to it.

    The stripped line must start with the literal name followed by nothing,
    whitespace or "=". "flask" never matches "flask-restful==1.0".
    """
    body, _ = _split_ending(line)
    stripped = _content(body)
    if not stripped.startswith(name):
        return None
    rest = stripped[len(name):]
    if rest and not (rest[0].isspace() or rest[0] == "="):
        return None
    return _PIN.match(rest)


def find_entry(text: str, name: str) -> ManifestEntry | None:
    """Locate the exact-equality pin for a package.

    Returns the first line pinning `name` with "==", "===" or "=", or None
    when the package is absent, unpinned, or constrained with any other
    operator.
    """
    for index, line in enumerate(text.splitlines(keepends=True)):
        match = _match_line(line, name)
        if match:
            return ManifestEntry(
                name=name,
                operator=match.group("op"),
                current_version=match.group("version"),
                line_index=index,
            )
    return None


def format_pin(name: str, version: str) -> str:
    return f"{name}=={version}"


def rewrite(text: str, name: str, new_version: str) -> str:
    """Pin a package to a new version and return the new manifest text.

    The whole version expression on the matched line becomes
    "name==new_version". Indentation, trailing markers/comments, the line
    ending and every other line are preserved.

    Raises:
        RewriteVerificationFailed: If the package has no exact pin, or if a
            re-scan of the result does not show "name==new_version" on the
            same line.
    """
    entry = find_entry(text, name)
    if entry is None:
        raise RewriteVerificationFailed(name, new_version, None)

    lines = text.splitlines(keepends=True)
    line = lines[entry.line_index]
    body, ending = _split_ending(line)
    stripped = _content(body)
    indent = body[: len(body) - len(stripped)]
    match = _match_line(line, name)
    remainder = stripped[len(name) + match.end():]
    lines[entry.line_index] = f"{indent}{format_pin(name, new_version)}{remainder}{ending}"
    new_text = "".join(lines)

    check = find_entry(new_text, name)
    if (
        check is None
        or check.line_index != entry.line_index
        or check.operator != "=="
        or check.current_version != new_version
    ):
        found = (
            f"{check.name}{check.operator}{check.current_version}" if check else None
        )
        raise RewriteVerificationFailed(name, new_version, found)
    return new_text
