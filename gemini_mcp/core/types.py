from dataclasses import dataclass, field
from typing import Any


def _require_int(data: dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field '{key}' must be an integer, got {type(value).__name__}")
    return value


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def _require_dict(data: Any, type_name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{type_name} must be an object, got {type(data).__name__}")
    return data


########################################################
########   Types for change mode edits         #########
########################################################


@dataclass(frozen=True)
class Edit:
    """One proposed code change. Line numbers are 1-indexed and inclusive."""

    filename: str
    old_code: str
    new_code: str
    start_line: int
    end_line: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "old_code": self.old_code,
            "new_code": self.new_code,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Edit":
        data = _require_dict(data, "Edit")
        return cls(
            filename=_require_str(data, "filename"),
            old_code=_require_str(data, "old_code"),
            new_code=_require_str(data, "new_code"),
            start_line=_require_int(data, "start_line"),
            end_line=_require_int(data, "end_line"),
        )


@dataclass(frozen=True)
class Chunk:
    """An ordered slice of a larger edit set."""

    index: int
    total: int
    edits: tuple[Edit, ...] = field(default_factory=tuple)
    has_more: bool = False
    estimated_chars: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "total": self.total,
            "edits": [edit.to_dict() for edit in self.edits],
            "has_more": self.has_more,
            "estimated_chars": self.estimated_chars,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Chunk":
        data = _require_dict(data, "Chunk")
        edits_raw = data.get("edits", [])
        if not isinstance(edits_raw, list):
            raise ValueError("Field 'edits' must be a list")
        has_more = data.get("has_more", False)
        if not isinstance(has_more, bool):
            raise ValueError("Field 'has_more' must be a boolean")
        return cls(
            index=_require_int(data, "index"),
            total=_require_int(data, "total"),
            edits=tuple(Edit.from_dict(item) for item in edits_raw),
            has_more=has_more,
            estimated_chars=int(data.get("estimated_chars", 0)),
        )


########################################################
########   Types for the chunk cache           #########
########################################################


@dataclass(frozen=True)
class CacheEntryMetadata:
    fingerprint: str
    created_at: float
    last_accessed_at: float
    total_chunks: int

    def age(self, now: float) -> float:
        return now - self.created_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "created_at": self.created_at,
            "last_accessed_at": self.last_accessed_at,
            "total_chunks": self.total_chunks,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntryMetadata":
        data = _require_dict(data, "CacheEntryMetadata")
        created_at = float(data["created_at"])
        return cls(
            fingerprint=_require_str(data, "fingerprint"),
            created_at=created_at,
            last_accessed_at=float(data.get("last_accessed_at", created_at)),
            total_chunks=_require_int(data, "total_chunks"),
        )


@dataclass(frozen=True)
class RetrievedChunk:
    chunk: Chunk
    fingerprint: str

    @property
    def is_last(self) -> bool:
        return self.chunk.index == self.chunk.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "is_last": self.is_last,
            "chunk": self.chunk.to_dict(),
        }
