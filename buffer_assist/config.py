import os
import tempfile

# Debug logging
DEBUG = os.getenv("BA_DEBUG", "").lower() in ("1", "true", "yes")
BASE_DIR = os.getenv("BA_BASE_DIR", os.path.join(tempfile.gettempdir(), "buffer-assist"))
DEBUG_LOG_PATH = os.getenv("BA_DEBUG_LOG", os.path.join(BASE_DIR, "runtime-debug.log"))
# BA_DEBUG_DUMP_VERBOSE=1: write full document/pattern dumps to the debug log (no truncation).
DEBUG_DUMP_VERBOSE = os.getenv("BA_DEBUG_DUMP_VERBOSE", "false").lower() in ("1", "true", "yes")
DEBUG_DUMP_MAX_LINES = int(os.getenv("BA_DEBUG_DUMP_MAX_LINES", "20"))
DEBUG_DUMP_MAX_CHARS = int(os.getenv("BA_DEBUG_DUMP_MAX_CHARS", "2000"))
# BA_LOG_REQUESTS=1: log every protocol command with its (truncated) arguments
LOG_REQUESTS = os.getenv("BA_LOG_REQUESTS", "").lower() in ("1", "true", "yes")

# Transport knobs
SERVER_HOST = os.getenv("BA_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("BA_PORT", "9999"))
# Serve on <BASE_DIR>/<session>.sock instead of TCP
USE_UNIX_SOCKET = os.getenv("BA_USE_UNIX_SOCKET", "false").lower() in ("1", "true", "yes")
MAX_MESSAGE_BYTES = int(os.getenv("BA_MAX_MESSAGE_BYTES", str(16 * 1024 * 1024)))

# Matching is quadratic per anchored line pair; callers bound it by capping document size.
MAX_CONTENT_CHARS = int(os.getenv("BA_MAX_CONTENT_CHARS", "2000000"))
