"""
Splitting of large edit sets into response-sized chunks.
"""

from gemini_mcp.core.types import Chunk, Edit
from gemini_mcp.gateway.constants import DEFAULT_MAX_CHUNK_CHARS

# Markdown headers, fences and OLD/NEW markers around each edit
EDIT_FORMAT_OVERHEAD = 250


def estimate_edit_size(edit: Edit) -> int:
    return len(edit.filename) + len(edit.old_code) + len(edit.new_code) + EDIT_FORMAT_OVERHEAD


def _group_by_file(edits: list[Edit]) -> list[list[Edit]]:
    groups: dict[str, list[Edit]] = {}
    for edit in edits:
        groups.setdefault(edit.filename, []).append(edit)
    return list(groups.values())


def chunk_edits(edits: list[Edit], max_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> list[Chunk]:
    """
    Pack ``edits`` into chunks of at most ``max_chars`` estimated characters.

    Edits for one file stay together when they fit; a file group larger than
    ``max_chars`` is split edit by edit, and a single oversized edit gets a chunk
    of its own. Always returns at least one chunk.
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    batches: list[list[Edit]] = []
    current: list[Edit] = []
    current_size = 0

    def close_current() -> None:
        nonlocal current, current_size
        if current:
            batches.append(current)
        current = []
        current_size = 0

    for group in _group_by_file(edits):
        group_size = sum(estimate_edit_size(edit) for edit in group)

        if current_size + group_size <= max_chars:
            current.extend(group)
            current_size += group_size
            continue

        close_current()
        if group_size <= max_chars:
            current.extend(group)
            current_size = group_size
            continue

        for edit in group:
            size = estimate_edit_size(edit)
            if current and current_size + size > max_chars:
                close_current()
            current.append(edit)
            current_size += size
        close_current()

    close_current()
    if not batches:
        batches.append([])

    total = len(batches)
    return [
        Chunk(
            index=number,
            total=total,
            edits=tuple(batch),
            has_more=number < total,
            estimated_chars=sum(estimate_edit_size(edit) for edit in batch),
        )
        for number, batch in enumerate(batches, start=1)
    ]
