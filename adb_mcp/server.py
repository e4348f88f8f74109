from typing import Any, Callable, Dict, Optional

from adb_mcp.config import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from adb_mcp.errors import AdbMcpError, ExecutionFailed, UnknownOperation
from adb_mcp.runner import AdbBridge
from adb_mcp.tools import (
    activity_manager_dispatch, devices_dispatch, install_dispatch, logcat_dispatch,
    package_manager_dispatch, pull_dispatch, push_dispatch, screenshot_dispatch,
    shell_dispatch, ui_hierarchy_dispatch,
)
from adb_mcp.utils import log_error

Handler = Callable[[Dict[str, Any], AdbBridge], str]

TOOL_HANDLERS: Dict[str, Handler] = {
    "adb_devices": devices_dispatch,
    "adb_shell": shell_dispatch,
    "adb_install": install_dispatch,
    "adb_logcat": logcat_dispatch,
    "adb_pull": pull_dispatch,
    "adb_push": push_dispatch,
    "adb_screenshot": screenshot_dispatch,
    "adb_ui_hierarchy": ui_hierarchy_dispatch,
    "adb_package_manager": package_manager_dispatch,
    "adb_activity_manager": activity_manager_dispatch,
}


def text_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text or ""}], "isError": False}


def error_result(message: str, kind: str) -> Dict[str, Any]:
    return {
        "content": [{"type": "text", "text": f"Error: {message}"}],
        "isError": True,
        "_meta": {"errorKind": kind},
    }


def make_response(req_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def make_error(req_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}}


def tools_list() -> Dict[str, Any]:
    device_serial_param = {
        "type": "string",
        "description": "Device serial number (optional if only one device)",
    }

    def command_tool(name: str, description: str, command_description: str) -> Dict[str, Any]:
        return {
            "name": name,
            "description": description,
            "inputSchema": {
                "type": "object",
                "properties": {
                    "command": {"type": "string", "description": command_description},
                    "device_serial": device_serial_param,
                },
                "required": ["command"],
            },
        }

    tools = [
        {
            "name": "adb_devices",
            "description": "List all connected Android devices",
            "inputSchema": {"type": "object", "properties": {}},
        },
        command_tool(
            "adb_shell",
            "Execute a shell command on the Android device",
            "Shell command to execute (interpreted by the device shell).",
        ),
        {
            "name": "adb_install",
            "description": "Install an APK file on the device",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "apk_path": {"type": "string", "description": "Local path to the APK file"},
                    "device_serial": device_serial_param,
                    "reinstall": {"type": "boolean", "description": "Reinstall the app if it already exists (default: false)"},
                },
                "required": ["apk_path"],
            },
        },
        {
            "name": "adb_logcat",
            "description": "View device logs with optional filtering",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "filter": {"type": "string", "description": "Filter expression (e.g., 'ActivityManager:I *:S'). Split on whitespace into filterspecs."},
                    "device_serial": device_serial_param,
                    "max_lines": {"type": "number", "description": "Maximum number of lines to return (default: 100; 0 or less also means 100)"},
                },
            },
        },
        {
            "name": "adb_pull",
            "description": "Pull a file from the device to the local system",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "remote_path": {"type": "string", "description": "Path on the device"},
                    "local_path": {"type": "string", "description": "Local destination path (supports ~ and $VARS)"},
                    "device_serial": device_serial_param,
                },
                "required": ["remote_path", "local_path"],
            },
        },
        {
            "name": "adb_push",
            "description": "Push a file from the local system to the device",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "local_path": {"type": "string", "description": "Local file path (supports ~ and $VARS)"},
                    "remote_path": {"type": "string", "description": "Destination path on the device"},
                    "device_serial": device_serial_param,
                },
                "required": ["local_path", "remote_path"],
            },
        },
        {
            "name": "adb_screenshot",
            "description": "Take a screenshot of the device screen",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "output_path": {"type": "string", "description": "Local path to save the screenshot"},
                    "device_serial": device_serial_param,
                },
                "required": ["output_path"],
            },
        },
        {
            "name": "adb_ui_hierarchy",
            "description": "Get the UI hierarchy in XML format for UI analysis",
            "inputSchema": {
                "type": "object",
                "properties": {"device_serial": device_serial_param},
            },
        },
        command_tool(
            "adb_package_manager",
            "Execute Package Manager (pm) commands - list packages, grant/revoke permissions",
            (
                "Package manager command (e.g., 'list packages', 'grant <package> <permission>'). "
                "Split on whitespace; quoting is not supported and arguments cannot contain spaces."
            ),
        ),
        command_tool(
            "adb_activity_manager",
            "Execute Activity Manager (am) commands - start activities, broadcast intents",
            (
                "Activity manager command (e.g., 'start -n <component>', 'broadcast -a <action>'). "
                "Split on whitespace; quoting is not supported and arguments cannot contain spaces."
            ),
        ),
    ]
    return {"tools": tools}


def call_tool(tool_name: Any, args: Optional[Dict[str, Any]], bridge: AdbBridge) -> Dict[str, Any]:
    try:
        handler = TOOL_HANDLERS.get(tool_name) if isinstance(tool_name, str) else None
        if handler is None:
            raise UnknownOperation(f"Unknown tool: {tool_name}")
        if not isinstance(args, dict):
            args = {}
        return text_result(handler(args, bridge))
    except ExecutionFailed as exc:
        log_error(
            f"tool execution error ({tool_name}): [{exc.kind}] {exc.reason} "
            f"(rc={exc.returncode}, argv={' '.join(exc.command_args)})"
        )
        return error_result(str(exc), exc.kind)
    except AdbMcpError as exc:
        log_error(f"tool execution error ({tool_name}): [{exc.kind}] {exc}")
        return error_result(str(exc), exc.kind)
    except Exception as exc:
        log_error(f"unexpected tool error ({tool_name}): {exc!r}")
        return error_result(str(exc) or exc.__class__.__name__, "InternalError")


def handle_request(request: Dict[str, Any], bridge: AdbBridge) -> Optional[Dict[str, Any]]:
    method = request.get("method")
    params = request.get("params") or {}
    req_id = request.get("id")

    # Notifications carry no id and get no reply.
    if "id" not in request:
        return None

    if method == "initialize":
        return make_response(req_id, {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        })

    if method == "ping":
        return make_response(req_id, {})

    if method == "tools/list":
        return make_response(req_id, tools_list())

    if method == "tools/call":
        return make_response(req_id, call_tool(params.get("name"), params.get("arguments"), bridge))

    return make_error(req_id, -32601, f"Unknown method: {method}")
