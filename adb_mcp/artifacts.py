"""Device-side temporary files used by the screenshot and UI dump tools.

A ``RemoteArtifact`` moves through three stages:

    created -> transferred -> cleaned

``created`` means a path has been reserved (the file may or may not exist on
the device yet), ``transferred`` means its contents have been read back, and
``cleaned`` means ``rm -f`` succeeded. ``cleanup()`` raises if the delete
fails, so a workflow that already retrieved its data still reports the error.
``discard()`` is the failure-path variant: it logs instead of raising so the
error from the failed step is the one the caller sees.
"""

from adb_mcp.errors import AdbMcpError
from adb_mcp.runner import AdbBridge
from adb_mcp.utils import log_error, unique_stamp

CREATED = "created"
TRANSFERRED = "transferred"
CLEANED = "cleaned"


class RemoteArtifact:
    def __init__(self, bridge: AdbBridge, serial: str, prefix: str, suffix: str = ""):
        self.bridge = bridge
        self.serial = serial
        self.path = bridge.remote_path(f"{prefix}_{unique_stamp()}{suffix}")
        self.stage = CREATED

    def shell(self, *args: str) -> str:
        return self.bridge.adb_device(self.serial, "shell", *args)

    def mark_transferred(self) -> None:
        self.stage = TRANSFERRED

    def cleanup(self) -> None:
        if self.stage == CLEANED:
            return
        self.shell("rm", "-f", self.path)
        self.stage = CLEANED

    def discard(self) -> None:
        try:
            self.cleanup()
        except AdbMcpError as exc:
            log_error(f"cleanup of {self.path} on {self.serial} failed: {exc}")
