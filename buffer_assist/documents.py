"""In-memory document store: the mutable side of replace_text and apply_diff.

The matching engine works on immutable snapshots; this store hands it the
snapshot and writes the result back. Mutations on one document are serialized
with a per-document lock held across read, compute and write-back.
"""

import difflib
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from . import config
from .search_replace import (
    execute_find_and_replace,
    execute_multi_find_and_replace,
    validate_single_edit,
)
from .utils import dbg


class DocumentError(Exception):
    """Document store failure (unknown buffer, bad arguments, I/O)."""

    def __init__(self, message: str, code: str = "document_error"):
        super().__init__(message)
        self.code = code


@dataclass
class Document:
    bufnr: int
    content: str
    filepath: str = ""
    modified: bool = False


def generate_diff(
    old_content: str,
    new_content: str,
    filepath: str,
    context_lines: int = 3,
) -> str:
    old_lines = (old_content or "").splitlines(keepends=True)
    new_lines = (new_content or "").splitlines(keepends=True)
    diff = difflib.unified_diff(
        old_lines,
        new_lines,
        fromfile=str(filepath),
        tofile=str(filepath),
        n=context_lines,
    )
    out: List[str] = []
    for line in diff:
        out.append(line)
        if not line.endswith("\n"):
            out.append("\n\\ No newline at end of file\n")
    return "".join(out)


def _check_bufnr(bufnr: Any) -> None:
    if bufnr is not None and (isinstance(bufnr, bool) or not isinstance(bufnr, int)):
        raise DocumentError("bufnr must be an integer", "missing_argument")


def _int_arg(data: Dict[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise DocumentError(f"{key} must be an integer", "invalid_diff")
    return value


def _resolve_line_index(index: int, line_count: int) -> int:
    """Buffer-style line index, clamped to the buffer.

    Negative values count from one past the last line.
    """
    if index < 0:
        index = line_count + 1 + index
    return min(max(index, 0), line_count)


class DocumentStore:
    def __init__(self):
        self._documents: Dict[int, Document] = {}
        self._locks: Dict[int, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._next_bufnr = 1
        self._current: Optional[int] = None

    # -- registry -------------------------------------------------------

    def open_document(self, content: Optional[str] = None, filepath: str = "") -> Document:
        """Register a document, reading it from filepath when content is not given."""
        if not isinstance(filepath, str):
            raise DocumentError("filepath must be a string", "missing_argument")
        if content is not None and not isinstance(content, str):
            raise DocumentError("content must be a string", "missing_argument")
        if content is None:
            if not filepath:
                raise DocumentError("content or filepath is required", "missing_argument")
            try:
                content = Path(filepath).read_text(encoding="utf-8")
            except OSError as exc:
                raise DocumentError(f"Failed to read {filepath}: {exc}", "io_error") from exc
        with self._registry_lock:
            bufnr = self._next_bufnr
            self._next_bufnr += 1
            doc = Document(bufnr=bufnr, content=content, filepath=filepath)
            self._documents[bufnr] = doc
            self._locks[bufnr] = threading.Lock()
            self._current = bufnr
        dbg(f"documents: opened buffer {bufnr} ({filepath or 'unnamed'}, len={len(content)})")
        return doc

    def set_current(self, bufnr: int) -> None:
        _check_bufnr(bufnr)
        with self._registry_lock:
            if bufnr not in self._documents:
                raise DocumentError(f"Unknown buffer: {bufnr}", "unknown_buffer")
            self._current = bufnr

    def _get(self, bufnr: Optional[int]) -> Document:
        _check_bufnr(bufnr)
        with self._registry_lock:
            key = self._current if bufnr is None else bufnr
            doc = self._documents.get(key) if key is not None else None
        if doc is None:
            if bufnr is None:
                raise DocumentError("No current buffer", "unknown_buffer")
            raise DocumentError(f"Unknown buffer: {bufnr}", "unknown_buffer")
        return doc

    @contextmanager
    def editing(self, bufnr: Optional[int] = None) -> Iterator[Document]:
        """Hold the document's lock: at most one in-flight edit per document."""
        doc = self._get(bufnr)
        with self._locks[doc.bufnr]:
            yield doc

    def get_current_content(self, bufnr: Optional[int] = None) -> Dict[str, Any]:
        doc = self._get(bufnr)
        content = doc.content
        return {
            "bufnr": doc.bufnr,
            "content": content,
            "lines": content.split("\n"),
            "filepath": doc.filepath,
        }

    def list_documents(self) -> List[Dict[str, Any]]:
        with self._registry_lock:
            docs = sorted(self._documents.values(), key=lambda d: d.bufnr)
            current = self._current
        return [
            {
                "bufnr": d.bufnr,
                "filepath": d.filepath,
                "modified": d.modified,
                "is_current": d.bufnr == current,
            }
            for d in docs
        ]

    # -- mutations ------------------------------------------------------

    def _check_size(self, content: str) -> None:
        if len(content) > config.MAX_CONTENT_CHARS:
            raise DocumentError(
                f"Buffer too large to edit ({len(content)} > {config.MAX_CONTENT_CHARS} chars)",
                "content_too_large",
            )

    def _commit(self, doc: Document, new_content: str) -> str:
        diff = generate_diff(doc.content, new_content, doc.filepath or f"buffer-{doc.bufnr}")
        if new_content != doc.content:
            doc.content = new_content
            doc.modified = True
        return diff

    def replace_text(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Locate old_string in the buffer and replace it. Raises on failure; buffer unchanged."""
        if data.get("old_string") is None or data.get("new_string") is None:
            raise DocumentError("old_string and new_string are required", "missing_argument")
        old_string, new_string, replace_all = validate_single_edit(
            data["old_string"], data["new_string"], data.get("replace_all")
        )

        with self.editing(data.get("bufnr")) as doc:
            self._check_size(doc.content)
            new_content = execute_find_and_replace(
                doc.content, old_string, new_string, replace_all=replace_all
            )
            diff = self._commit(doc, new_content)
        return {
            "success": True,
            "message": "All occurrences replaced" if replace_all else "Text replaced",
            "diff": diff,
        }

    def multi_edit(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply several edits to one buffer, all or nothing."""
        edits = data.get("edits")
        if not isinstance(edits, list) or not edits:
            raise DocumentError("edits array is required", "missing_argument")
        if not all(isinstance(e, dict) for e in edits):
            raise DocumentError("each edit must be an object", "missing_argument")

        with self.editing(data.get("bufnr")) as doc:
            self._check_size(doc.content)
            new_content = execute_multi_find_and_replace(doc.content, edits)
            diff = self._commit(doc, new_content)
        return {
            "success": True,
            "message": f"Applied {len(edits)} edit(s)",
            "diff": diff,
        }

    def apply_diff(self, data: Dict[str, Any]) -> Dict[str, Any]:
        diff_type = data.get("type")
        content = data.get("content")
        if diff_type not in ("full_replace", "line_range", "unified_diff"):
            raise DocumentError(f"Unknown diff type: {diff_type}", "invalid_diff")
        if not isinstance(content, str):
            raise DocumentError("content is required", "missing_argument")

        with self.editing(data.get("bufnr")) as doc:
            if diff_type == "line_range":
                lines = doc.content.split("\n")
                start = _resolve_line_index(_int_arg(data, "start_line", 0), len(lines))
                end = _resolve_line_index(_int_arg(data, "end_line", -1), len(lines))
                if end < start:
                    raise DocumentError(
                        f"end_line {end} precedes start_line {start}", "invalid_diff"
                    )
                lines[start:end] = content.split("\n")
                self._commit(doc, "\n".join(lines))
                return {"success": True, "message": "Lines updated"}
            self._commit(doc, content)
        if diff_type == "full_replace":
            return {"success": True, "message": "Buffer replaced"}
        return {"success": True, "message": "Diff applied"}

    def save_document(self, bufnr: Optional[int] = None, filepath: Optional[str] = None) -> str:
        """Write a buffer to disk; returns the path written."""
        if filepath is not None and not isinstance(filepath, str):
            raise DocumentError("filepath must be a string", "missing_argument")
        with self.editing(bufnr) as doc:
            target = filepath or doc.filepath
            if not target:
                raise DocumentError("Buffer has no file path", "missing_argument")
            try:
                path = Path(target)
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(doc.content, encoding="utf-8")
            except OSError as exc:
                raise DocumentError(f"Failed to write {target}: {exc}", "io_error") from exc
            doc.filepath = target
            doc.modified = False
        dbg(f"documents: wrote buffer {doc.bufnr} to {target}")
        return target
