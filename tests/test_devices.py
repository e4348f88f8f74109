from __future__ import annotations

import pytest

from adb_mcp.config import ServerConfig
from adb_mcp.devices import parse_device_serials, resolve_serial
from adb_mcp.errors import AmbiguousDevice, NoDeviceConnected
from adb_mcp.runner import AdbBridge

from conftest import FakeRunner


def _bridge(devices: str) -> tuple[AdbBridge, FakeRunner]:
    runner = FakeRunner(devices=devices)
    return AdbBridge(ServerConfig(), runner=runner), runner


def test_parse_device_serials_skips_header_and_daemon_notices() -> None:
    output = (
        "* daemon not running; starting now at tcp:5037\n"
        "* daemon started successfully\n"
        "List of devices attached\n"
        "emulator-5554\tdevice\n"
        "R58M123ABC     unauthorized\n"
        "\n"
    )
    assert parse_device_serials(output) == ["emulator-5554", "R58M123ABC"]


def test_resolve_serial_with_no_devices() -> None:
    bridge, _ = _bridge("List of devices attached\n\n")
    with pytest.raises(NoDeviceConnected) as excinfo:
        resolve_serial(bridge)
    assert excinfo.value.kind == "NoDeviceConnected"


def test_resolve_serial_with_two_devices_is_ambiguous() -> None:
    bridge, _ = _bridge("List of devices attached\nemulator-5554\tdevice\nemulator-5556\tdevice\n")
    with pytest.raises(AmbiguousDevice) as excinfo:
        resolve_serial(bridge)
    assert "device_serial" in str(excinfo.value)


def test_resolve_serial_with_one_device() -> None:
    bridge, runner = _bridge("List of devices attached\n0123456789ABCDEF\tdevice\n")
    assert resolve_serial(bridge) == "0123456789ABCDEF"
    assert runner.calls == [["devices"]]


def test_resolve_serial_explicit_skips_lookup() -> None:
    bridge, runner = _bridge("List of devices attached\n\n")
    assert resolve_serial(bridge, "192.168.1.20:5555") == "192.168.1.20:5555"
    assert runner.calls == []


def test_resolve_serial_empty_explicit_falls_back_to_lookup() -> None:
    bridge, runner = _bridge("List of devices attached\nemulator-5554\tdevice\n")
    assert resolve_serial(bridge, "") == "emulator-5554"
    assert runner.calls == [["devices"]]
