"""buffer-assist server entrypoint."""

import argparse
import signal
import sys
import time

from . import config
from .documents import DocumentError, DocumentStore
from .server import start_server, stop_server


def main(argv=None):
    """Start the line-delimited JSON server and block until interrupted."""
    parser = argparse.ArgumentParser(prog="buffer-assist")
    parser.add_argument("--host", default=config.SERVER_HOST)
    parser.add_argument("--port", type=int, default=config.SERVER_PORT)
    parser.add_argument(
        "--unix",
        action="store_true",
        default=config.USE_UNIX_SOCKET,
        help=f"serve on a Unix socket under {config.BASE_DIR}",
    )
    parser.add_argument("files", nargs="*", help="files to open as buffers")
    args = parser.parse_args(argv)

    store = DocumentStore()
    for path in args.files:
        try:
            doc = store.open_document(filepath=path)
        except DocumentError as exc:
            print(f"[{exc}]", file=sys.stderr)
            sys.exit(1)
        print(f"[Opened buffer {doc.bufnr}: {path}]", file=sys.stderr)

    try:
        server = start_server(store, host=args.host, port=args.port, unix=args.unix)
    except OSError as exc:
        print(f"Failed to start server: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.unix:
        where = server.server_address
    else:
        where = "%s:%d" % server.server_address[:2]
    print(f"[Session {server.session_id} listening on {where}. Ctrl+C to exit.]", file=sys.stderr)
    signal.signal(signal.SIGTERM, lambda sig, frame: sys.exit(0))
    try:
        while True:
            time.sleep(1)
    except (KeyboardInterrupt, SystemExit):
        print("\nServer shutting down...", file=sys.stderr)
    finally:
        stop_server(server)


if __name__ == "__main__":
    main()
