"""
Rendering of change-mode edits as machine-applicable text.
"""

from collections import Counter

from gemini_mcp.core.types import Chunk, Edit

SUMMARY_EDIT_THRESHOLD = 5


def _format_edit(number: int, edit: Edit) -> str:
    line_range = (
        f"line {edit.start_line}"
        if edit.start_line == edit.end_line
        else f"lines {edit.start_line}-{edit.end_line}"
    )
    return (
        f"### Edit {number}: `{edit.filename}` ({line_range})\n\n"
        "OLD:\n"
        f"```\n{edit.old_code}\n```\n\n"
        "NEW:\n"
        f"```\n{edit.new_code}\n```"
    )


def _continuation_guidance(chunk: Chunk, cache_key: str | None) -> str:
    if not chunk.has_more:
        return f"This is the final chunk ({chunk.index} of {chunk.total}). All edits have been delivered."

    next_index = chunk.index + 1
    if cache_key is None:
        return f"{chunk.total - chunk.index} more chunk(s) remain but could not be cached."
    return (
        f"More edits remain: chunk {next_index} of {chunk.total} is ready.\n"
        "To continue, call either:\n"
        f'- `ask-gemini` with `change_mode=true`, `chunk_index={next_index}`, '
        f'`chunk_cache_key="{cache_key}"`\n'
        f'- `fetch-chunk` with `chunk_index={next_index}`, `chunk_cache_key="{cache_key}"`\n'
        "Apply the edits above before requesting the next chunk."
    )


def format_change_mode_response(
    edits: list[Edit] | tuple[Edit, ...],
    chunk: Chunk | None = None,
    cache_key: str | None = None,
) -> str:
    """
    Render ``edits`` with exact OLD/NEW sections ready to apply.

    When ``chunk`` is part of a multi-chunk set, a chunk header and instructions
    for retrieving the next chunk are added.
    """
    multi_chunk = chunk is not None and chunk.total > 1
    sections: list[str] = []

    if multi_chunk:
        sections.append(f"## Chunk {chunk.index} of {chunk.total}")
    sections.append(
        f"Gemini proposed {len(edits)} edit(s). "
        "The OLD text must match the file exactly, including whitespace and indentation."
    )
    sections.extend(_format_edit(number, edit) for number, edit in enumerate(edits, start=1))

    if multi_chunk:
        sections.append(_continuation_guidance(chunk, cache_key))

    return "\n\n".join(sections)


def summarize_edits(edits: list[Edit] | tuple[Edit, ...], is_partial_view: bool = False) -> str:
    """Per-file edit counts for a whole edit set."""
    per_file = Counter(edit.filename for edit in edits)
    lines = [f"## Summary: {len(edits)} edit(s) across {len(per_file)} file(s)"]
    lines.extend(f"- `{filename}`: {count} edit(s)" for filename, count in per_file.items())
    if is_partial_view:
        lines.append("")
        lines.append("Edits are delivered in chunks; only the first chunk is shown below.")
    return "\n".join(lines)


def should_summarize(edit_count: int) -> bool:
    return edit_count > SUMMARY_EDIT_THRESHOLD
