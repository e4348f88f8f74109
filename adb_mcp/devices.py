from typing import List, Optional

from adb_mcp.config import DEVICES_HEADER
from adb_mcp.errors import AmbiguousDevice, NoDeviceConnected
from adb_mcp.runner import AdbBridge


def parse_device_serials(output: str) -> List[str]:
    """Serials from ``adb devices`` output, one per listed device line.

    Skips the header and the ``* daemon ...`` notices adb prints when it has
    to start its server.
    """
    serials = []
    for line in (output or "").splitlines():
        stripped = line.strip()
        if not stripped or DEVICES_HEADER in stripped or stripped.startswith("*"):
            continue
        serials.append(stripped.split()[0])
    return serials


def resolve_serial(bridge: AdbBridge, explicit: Optional[str] = None) -> str:
    if explicit:
        return explicit

    serials = parse_device_serials(bridge.adb("devices"))
    if not serials:
        raise NoDeviceConnected("No devices connected")
    if len(serials) > 1:
        raise AmbiguousDevice(
            f"Multiple devices connected ({', '.join(serials)}). Please specify device_serial parameter"
        )
    return serials[0]
