"""
Parsing of change-mode output into structured edits.
"""

import re

from gemini_mcp.core.types import Edit

_HEADER_PATTERN = re.compile(
    r"^\*\*FILE:\s*(?P<filename>.+?)(?::(?P<line>\d+))?\*\*[ \t]*$",
    re.MULTILINE,
)
_FENCE_PATTERN = re.compile(r"```[^\n]*\n(.*?)\n?```", re.DOTALL)
_OLD_NEW_PATTERN = re.compile(
    r"^OLD:[ \t]*\n(?P<old>.*?)^NEW:[ \t]*(?:\n(?P<new>.*))?\Z",
    re.MULTILINE | re.DOTALL,
)


def _line_count(code: str) -> int:
    return len(code.splitlines())


def _split_old_new(block: str) -> tuple[str, str] | None:
    match = _OLD_NEW_PATTERN.search(block)
    if match is None:
        return None
    old = match.group("old").removesuffix("\n")
    new = (match.group("new") or "").removesuffix("\n")
    return old, new


def parse_change_mode_output(text: str) -> list[Edit]:
    """
    Extract every ``**FILE: name:line**`` block with OLD/NEW sections from ``text``.

    Blocks without both markers are skipped. Edits are returned in order of
    appearance; a missing line number defaults to 1.
    """
    headers = list(_HEADER_PATTERN.finditer(text))
    edits: list[Edit] = []

    for position, header in enumerate(headers):
        body_end = headers[position + 1].start() if position + 1 < len(headers) else len(text)
        body = text[header.end() : body_end]

        fence = _FENCE_PATTERN.search(body)
        block = fence.group(1) if fence else body.strip("\n")
        parts = _split_old_new(block)
        if parts is None:
            continue
        old_code, new_code = parts

        start_line = int(header.group("line")) if header.group("line") else 1
        end_line = max(start_line, start_line + _line_count(old_code) - 1)
        edits.append(
            Edit(
                filename=header.group("filename").strip(),
                old_code=old_code,
                new_code=new_code,
                start_line=start_line,
                end_line=end_line,
            )
        )

    return edits


def validate_edits(edits: list[Edit]) -> list[str]:
    """Return a human-readable problem description for each bad edit; empty when all are usable."""
    problems: list[str] = []
    for number, edit in enumerate(edits, start=1):
        label = f"Edit {number} ({edit.filename or '<no file>'})"
        if not edit.filename.strip():
            problems.append(f"{label}: missing filename")
        if not edit.old_code.strip() and not edit.new_code.strip():
            problems.append(f"{label}: both OLD and NEW are empty")
        elif edit.old_code == edit.new_code:
            problems.append(f"{label}: OLD and NEW are identical")
        if edit.start_line < 1:
            problems.append(f"{label}: start line must be >= 1, got {edit.start_line}")
        if edit.end_line < edit.start_line:
            problems.append(
                f"{label}: end line {edit.end_line} precedes start line {edit.start_line}"
            )
    return problems
