"""Dispatch one JSON request line to the document store and encode the reply."""

import json
from typing import Any, Callable, Dict

from .documents import DocumentError, DocumentStore
from .search_replace import SearchReplaceError
from .utils import dbg, request_log


def _error(message: str, code: str) -> Dict[str, Any]:
    return {"success": False, "error": message, "code": code}


def _ping(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"success": True, "message": "pong"}


def _get_buffer(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"success": True, "data": store.get_current_content(data.get("bufnr"))}


def _list_buffers(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"success": True, "data": store.list_documents()}


def _open_buffer(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    doc = store.open_document(content=data.get("content"), filepath=data.get("filepath") or "")
    return {"success": True, "data": {"bufnr": doc.bufnr, "filepath": doc.filepath}}


def _save_buffer(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    path = store.save_document(data.get("bufnr"), data.get("filepath"))
    return {"success": True, "message": "Buffer written", "data": {"filepath": path}}


def _replace_text(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    return store.replace_text(data)


def _multi_edit(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    return store.multi_edit(data)


def _apply_diff(store: DocumentStore, data: Dict[str, Any]) -> Dict[str, Any]:
    return store.apply_diff(data)


COMMANDS: Dict[str, Callable[[DocumentStore, Dict[str, Any]], Dict[str, Any]]] = {
    "ping": _ping,
    "get_buffer": _get_buffer,
    "list_buffers": _list_buffers,
    "open_buffer": _open_buffer,
    "save_buffer": _save_buffer,
    "replace_text": _replace_text,
    "multi_edit": _multi_edit,
    "apply_diff": _apply_diff,
}


def handle_request(store: DocumentStore, request: Any) -> Dict[str, Any]:
    """Run one decoded request and return the response object."""
    if not isinstance(request, dict):
        return _error("Request must be a JSON object", "invalid_request")
    command = request.get("command")
    data = request.get("data") or {}
    if not isinstance(data, dict):
        return _error("data must be a JSON object", "invalid_request")
    handler = COMMANDS.get(command) if isinstance(command, str) else None
    if handler is None:
        return _error(f"Unknown command: {command if command is not None else 'nil'}", "unknown_command")

    request_log(command, data)
    try:
        return handler(store, data)
    except (SearchReplaceError, DocumentError) as e:
        dbg(f"handlers: {command} failed ({e.code}): {e}")
        return _error(str(e), e.code)


def handle_message(store: DocumentStore, message: str) -> str:
    """Decode a request line, run it, and encode the response line (no terminator)."""
    try:
        request = json.loads(message)
    except json.JSONDecodeError:
        return json.dumps(_error("Invalid JSON", "invalid_json"))
    return json.dumps(handle_request(store, request))
