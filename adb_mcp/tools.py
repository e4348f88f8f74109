from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from adb_mcp.artifacts import RemoteArtifact
from adb_mcp.config import DEFAULT_LOGCAT_LINES, MAX_LOGCAT_LINES
from adb_mcp.devices import resolve_serial
from adb_mcp.errors import AdbMcpError, InvalidArguments
from adb_mcp.runner import AdbBridge
from adb_mcp.utils import clamp_int, expand_local_path, split_words, tail_lines, to_bool


@dataclass(frozen=True)
class ManagerCommand:
    """Argument string for ``pm``/``am``, split on plain whitespace.

    There is no quoting or escaping: ``'start -n a/.B'`` becomes three
    arguments and an argument that itself contains a space cannot be passed.
    """

    argv: Tuple[str, ...]

    @classmethod
    def parse(cls, raw: Any) -> "ManagerCommand":
        if raw is None:
            raise InvalidArguments("missing required argument: command")
        if not isinstance(raw, str):
            raise InvalidArguments("command must be a string")
        argv = tuple(split_words(raw))
        if not argv:
            raise InvalidArguments("command must not be empty")
        return cls(argv=argv)


def _require_str(args: Dict[str, Any], key: str) -> str:
    value = args.get(key)
    if value is None or value == "":
        raise InvalidArguments(f"missing required argument: {key}")
    if not isinstance(value, str):
        raise InvalidArguments(f"{key} must be a string")
    return value


def _optional_str(args: Dict[str, Any], key: str) -> Optional[str]:
    value = args.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidArguments(f"{key} must be a string")
    return value


def _serial(args: Dict[str, Any], bridge: AdbBridge) -> str:
    return resolve_serial(bridge, _optional_str(args, "device_serial"))


def devices_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    return bridge.adb("devices", "-l")


def shell_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    command = _require_str(args, "command")
    serial = _serial(args, bridge)
    # Passed as one argument; the device shell interprets it.
    return bridge.adb_device(serial, "shell", command)


def install_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    apk_path = expand_local_path(_require_str(args, "apk_path"))
    serial = _serial(args, bridge)
    install_args = ["install"]
    if to_bool(args.get("reinstall", False)):
        install_args.append("-r")
    install_args.append(apk_path)
    return bridge.adb_device(serial, *install_args)


def logcat_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    filter_expr = _optional_str(args, "filter")
    # 0, negative or non-numeric means the default
    max_lines = clamp_int(args.get("max_lines"), DEFAULT_LOGCAT_LINES, 0, MAX_LOGCAT_LINES) or DEFAULT_LOGCAT_LINES
    serial = _serial(args, bridge)
    logcat_args = ["logcat", "-d"]
    if filter_expr:
        logcat_args.extend(split_words(filter_expr))
    output = bridge.adb_device(serial, *logcat_args)
    return tail_lines(output, max_lines)


def pull_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    remote_path = _require_str(args, "remote_path")
    local_path = expand_local_path(_require_str(args, "local_path"))
    serial = _serial(args, bridge)
    return bridge.adb_device(serial, "pull", remote_path, local_path)


def push_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    local_path = expand_local_path(_require_str(args, "local_path"))
    remote_path = _require_str(args, "remote_path")
    serial = _serial(args, bridge)
    return bridge.adb_device(serial, "push", local_path, remote_path)


def screenshot_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    output_path = expand_local_path(_require_str(args, "output_path"))
    serial = _serial(args, bridge)
    artifact = RemoteArtifact(bridge, serial, "mcp_screenshot", ".png")
    try:
        artifact.shell("screencap", "-p", artifact.path)
        bridge.adb_device(serial, "pull", artifact.path, output_path)
        artifact.mark_transferred()
    except AdbMcpError:
        artifact.discard()
        raise
    artifact.cleanup()
    return f"Screenshot saved to {output_path}"


def ui_hierarchy_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    serial = _serial(args, bridge)
    artifact = RemoteArtifact(bridge, serial, "mcp_window_dump", ".xml")
    try:
        artifact.shell("uiautomator", "dump", artifact.path)
        xml_content = artifact.shell("cat", artifact.path)
        artifact.mark_transferred()
    except AdbMcpError:
        artifact.discard()
        raise
    artifact.cleanup()
    return xml_content


def package_manager_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    command = ManagerCommand.parse(args.get("command"))
    serial = _serial(args, bridge)
    return bridge.adb_device(serial, "shell", "pm", *command.argv)


def activity_manager_dispatch(args: Dict[str, Any], bridge: AdbBridge) -> str:
    command = ManagerCommand.parse(args.get("command"))
    serial = _serial(args, bridge)
    return bridge.adb_device(serial, "shell", "am", *command.argv)
