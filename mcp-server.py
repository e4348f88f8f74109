#!/usr/bin/env python3
"""
ADB MCP server launcher.

Exposes Android device management over MCP stdio:
- adb_devices / adb_shell / adb_install / adb_logcat
- adb_pull / adb_push / adb_screenshot / adb_ui_hierarchy
- adb_package_manager / adb_activity_manager

Every tool call runs a fresh adb process; set ADB_PATH (or --adb-path)
when adb is not on PATH.
"""

from adb_mcp.main import main


if __name__ == "__main__":
    main()
