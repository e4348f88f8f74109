import subprocess
import threading
from dataclasses import dataclass, field
from typing import Callable, IO, List, Sequence

from adb_mcp.config import BUFFER_SIZE, MAX_OUTPUT_BYTES, ServerConfig
from adb_mcp.errors import ExecutionFailed, OutputTooLarge


@dataclass(frozen=True)
class CapturedOutput:
    args: List[str]
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def text(self) -> str:
        # adb prints push/pull/install progress on stderr even when it succeeds
        return self.stdout or self.stderr


@dataclass
class _StreamBuffer:
    limit: int
    data: bytearray = field(default_factory=bytearray)
    overflow: bool = False

    def feed(self, chunk: bytes) -> None:
        room = self.limit - len(self.data)
        if len(chunk) > room:
            self.overflow = True
            chunk = chunk[:max(room, 0)]
        self.data.extend(chunk)


def _drain(stream: IO[bytes], buffer: _StreamBuffer) -> None:
    # Keeps reading past the limit so the child never blocks on a full pipe;
    # overflow is reported once the process has exited.
    with stream:
        while True:
            chunk = stream.read1(BUFFER_SIZE)
            if not chunk:
                break
            buffer.feed(chunk)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def run_process(
    executable: str,
    args: Sequence[str],
    max_output_bytes: int = MAX_OUTPUT_BYTES,
) -> CapturedOutput:
    argv = [executable] + [str(arg) for arg in args]
    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise ExecutionFailed(f"cannot start {executable}: {exc}", args=argv) from exc

    stderr_buffer = _StreamBuffer(limit=max_output_bytes)
    stderr_thread = threading.Thread(target=_drain, args=(proc.stderr, stderr_buffer), daemon=True)
    stderr_thread.start()

    stdout = bytearray()
    too_large = False
    with proc.stdout:
        while True:
            chunk = proc.stdout.read1(BUFFER_SIZE)
            if not chunk:
                break
            stdout.extend(chunk)
            if len(stdout) > max_output_bytes:
                too_large = True
                proc.kill()
                break

    returncode = proc.wait()
    stderr_thread.join()

    if too_large or stderr_buffer.overflow:
        raise OutputTooLarge(max_output_bytes, args=argv)

    out_text = _decode(bytes(stdout))
    err_text = _decode(bytes(stderr_buffer.data))

    if returncode != 0:
        reason = err_text.strip() or out_text.strip() or f"{executable} exited with status {returncode}"
        raise ExecutionFailed(reason, args=argv, returncode=returncode)

    return CapturedOutput(args=argv, stdout=out_text, stderr=err_text, returncode=returncode)


Runner = Callable[[str, Sequence[str], int], CapturedOutput]


class AdbBridge:
    """Runs adb with the executable path and output ceiling fixed at startup."""

    def __init__(self, config: ServerConfig, runner: Runner = run_process):
        self.config = config
        self._runner = runner

    def run(self, *args: str) -> CapturedOutput:
        return self._runner(self.config.adb_path, list(args), self.config.max_output_bytes)

    def adb(self, *args: str) -> str:
        return self.run(*args).text

    def adb_device(self, serial: str, *args: str) -> str:
        return self.adb("-s", serial, *args)

    def remote_path(self, name: str) -> str:
        base = self.config.remote_tmp_dir.rstrip("/")
        return f"{base}/{name}"
