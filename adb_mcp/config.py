import os
from dataclasses import dataclass
from typing import Mapping, Optional

# ========= Static config =========
SERVER_NAME = "adb-mcp"
SERVER_VERSION = "0.2.0"
PROTOCOL_VERSION = "2024-11-05"

DEFAULT_ADB_PATH = "adb"
DEFAULT_REMOTE_TMP_DIR = "/sdcard"

BUFFER_SIZE = 65536
MAX_OUTPUT_BYTES = 10 * 1024 * 1024

DEFAULT_LOGCAT_LINES = 100
MAX_LOGCAT_LINES = 100_000

DEVICES_HEADER = "List of devices"


# ========= Runtime Configuration =========
@dataclass(frozen=True)
class ServerConfig:
    adb_path: str = DEFAULT_ADB_PATH
    max_output_bytes: int = MAX_OUTPUT_BYTES
    remote_tmp_dir: str = DEFAULT_REMOTE_TMP_DIR

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        adb_path = (env.get("ADB_PATH") or "").strip() or DEFAULT_ADB_PATH
        remote_tmp_dir = (env.get("ADB_MCP_REMOTE_TMP_DIR") or "").strip() or DEFAULT_REMOTE_TMP_DIR

        max_output_bytes = MAX_OUTPUT_BYTES
        raw_limit = env.get("ADB_MCP_MAX_OUTPUT_BYTES")
        if raw_limit:
            try:
                max_output_bytes = int(raw_limit)
            except ValueError:
                max_output_bytes = MAX_OUTPUT_BYTES
            if max_output_bytes <= 0:
                max_output_bytes = MAX_OUTPUT_BYTES

        return cls(
            adb_path=adb_path,
            max_output_bytes=max_output_bytes,
            remote_tmp_dir=remote_tmp_dir.rstrip("/") or "/",
        )
