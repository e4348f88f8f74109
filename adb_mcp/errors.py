"""Error kinds raised while serving a tool call.

Every failure a handler can produce is one of the classes below. The router in
``adb_mcp.server`` catches ``AdbMcpError`` and renders ``kind`` plus the message
into an error envelope.
"""


class AdbMcpError(Exception):
    kind = "AdbMcpError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExecutionFailed(AdbMcpError):
    """adb could not be started or exited with a non-zero status."""

    kind = "ExecutionFailed"

    def __init__(self, reason: str, args=None, returncode=None):
        super().__init__(f"ADB command failed: {reason}")
        self.reason = reason
        self.command_args = list(args or [])
        self.returncode = returncode


class OutputTooLarge(ExecutionFailed):
    kind = "OutputTooLarge"

    def __init__(self, limit: int, args=None):
        super().__init__(f"output exceeded {limit} bytes", args=args)
        self.limit = limit


class NoDeviceConnected(AdbMcpError):
    kind = "NoDeviceConnected"


class AmbiguousDevice(AdbMcpError):
    kind = "AmbiguousDevice"


class UnknownOperation(AdbMcpError):
    kind = "UnknownOperation"


class InvalidArguments(AdbMcpError):
    kind = "InvalidArguments"
