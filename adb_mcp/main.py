import sys
import io
import json
import argparse
import dataclasses
from typing import Any, Dict, Iterable, Optional, TextIO

from adb_mcp.config import ServerConfig
from adb_mcp.runner import AdbBridge
from adb_mcp.server import handle_request, make_error
from adb_mcp.utils import log_error


def _write_response(stream: TextIO, response: Dict[str, Any]) -> None:
    """Write JSON-RPC response to stdout as UTF-8."""
    try:
        stream.write(json.dumps(response, ensure_ascii=False) + "\n")
        stream.flush()
    except (OSError, UnicodeError, ValueError) as exc:
        log_error(f"response write error: {exc}")
        # Fallback: escape all non-ASCII to guarantee safe output
        try:
            stream.write(json.dumps(response, ensure_ascii=True) + "\n")
            stream.flush()
        except (OSError, ValueError) as exc2:
            log_error(f"response write fallback error: {exc2}")


def build_config(argv: Optional[Iterable[str]] = None, environ=None) -> ServerConfig:
    config = ServerConfig.from_env(environ)

    parser = argparse.ArgumentParser(
        description="ADB MCP Server (Android device management tools over stdio)"
    )
    parser.add_argument("--adb-path", help="Path to the adb executable (overrides ADB_PATH env)")
    parser.add_argument("--max-output-bytes", type=int, help="Output ceiling per adb call (overrides ADB_MCP_MAX_OUTPUT_BYTES env)")
    parser.add_argument("--remote-tmp-dir", help="Device directory for temporary files (overrides ADB_MCP_REMOTE_TMP_DIR env)")
    args = parser.parse_args(None if argv is None else list(argv))

    overrides: Dict[str, Any] = {}
    if args.adb_path: overrides["adb_path"] = args.adb_path
    if args.remote_tmp_dir: overrides["remote_tmp_dir"] = args.remote_tmp_dir.rstrip("/") or "/"
    if args.max_output_bytes is not None:
        if args.max_output_bytes <= 0:
            parser.error("--max-output-bytes must be positive")
        overrides["max_output_bytes"] = args.max_output_bytes

    return dataclasses.replace(config, **overrides) if overrides else config


def serve(bridge: AdbBridge, stdin: Iterable[str], stdout: TextIO) -> None:
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError as exc:
            log_error(f"invalid json: {exc}")
            continue
        if not isinstance(request, dict):
            log_error("invalid request: expected a JSON object")
            continue
        try:
            response = handle_request(request, bridge)
        except Exception as exc:
            log_error(f"unexpected error: {exc}")
            # Send an error back so the client doesn't hang
            if "id" not in request:
                continue
            response = make_error(request.get("id"), -32603, f"Internal error: {exc}")
        if response is not None:
            _write_response(stdout, response)


def main(argv: Optional[Iterable[str]] = None) -> None:
    config = build_config(argv)
    bridge = AdbBridge(config)

    # Force UTF-8 I/O; device output is not guaranteed to fit the console code page
    stdin = io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", errors="replace")
    stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", line_buffering=True)

    log_error(f"ADB MCP Server running on stdio (adb={config.adb_path}, tmp={config.remote_tmp_dir})")
    serve(bridge, stdin, stdout)
    log_error("shutting down...")


if __name__ == "__main__":
    main()
