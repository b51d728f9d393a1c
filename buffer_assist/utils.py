import os
import sys
import time

from . import config


def _append_log(line: str):
    try:
        os.makedirs(os.path.dirname(config.DEBUG_LOG_PATH) or ".", exist_ok=True)
        with open(config.DEBUG_LOG_PATH, "a") as f:
            f.write(line + "\n")
    except OSError:
        pass


def dbg(message: str):
    if not config.DEBUG:
        return
    ts = time.strftime("%Y-%m-%d %H:%M:%S")
    line = f"[debug] [{ts} pid={os.getpid()}] {message}"
    print(line, file=sys.stderr)
    _append_log(line)


def request_log(command: str, data: dict):
    """Write a protocol command (name + args) to stderr and the debug log file."""
    if not config.LOG_REQUESTS:
        return
    max_len = 200
    def _arg_repr(v):
        s = repr(v)
        return (s[:max_len] + "...") if len(s) > max_len else s
    parts = [f"{k}={_arg_repr(v)}" for k, v in sorted((data or {}).items())]
    ts = time.strftime("%Y-%m-%d %H:%M:%S")
    line = f"[request] [{ts} pid={os.getpid()}] {command}({', '.join(parts)})"
    print(line, file=sys.stderr)
    _append_log(line)


def dbg_dump(label: str, text: str):
    """Dump debug output. Truncated by default; full dump when BA_DEBUG_DUMP_VERBOSE=true."""
    if not config.DEBUG:
        return
    content = text or ""
    if config.DEBUG_DUMP_VERBOSE:
        _append_log(f"\n[debug_dump] {label}\n{content}")
        return
    # Truncated: header + first N non-empty lines / max chars
    max_lines = config.DEBUG_DUMP_MAX_LINES
    max_chars = config.DEBUG_DUMP_MAX_CHARS
    lines = [ln for ln in content.splitlines() if ln.strip()]
    preview = "\n".join(lines[:max_lines])
    if len(preview) > max_chars:
        preview = preview[:max_chars]
    truncated = len(lines) > max_lines or len(content) > max_chars
    _append_log(
        f"\n[debug_dump] {label} (len={len(content)})"
        f"{' …(truncated)' if truncated else ''}\n{preview}"
    )
