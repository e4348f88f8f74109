from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import pytest

from adb_mcp.config import ServerConfig
from adb_mcp.runner import AdbBridge, CapturedOutput

ONE_DEVICE = "List of devices attached\nemulator-5554\tdevice\n\n"


class FakeRunner:
    """Stands in for run_process; records every argv it is asked to run."""

    def __init__(self, respond: Optional[Callable[[List[str]], str]] = None, devices: str = ONE_DEVICE):
        self.calls: List[List[str]] = []
        self.executables: List[str] = []
        self.limits: List[int] = []
        self._respond = respond
        self._devices = devices

    def __call__(self, executable: str, args: Sequence[str], max_output_bytes: int) -> CapturedOutput:
        args = list(args)
        self.calls.append(args)
        self.executables.append(executable)
        self.limits.append(max_output_bytes)
        if args == ["devices"]:
            stdout = self._devices
        elif self._respond is not None:
            stdout = self._respond(args)
        else:
            stdout = ""
        return CapturedOutput(args=[executable] + args, stdout=stdout, stderr="", returncode=0)

    def device_calls(self) -> List[List[str]]:
        return [call for call in self.calls if call != ["devices"]]


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(adb_path="/opt/sdk/adb", max_output_bytes=4096, remote_tmp_dir="/sdcard")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def bridge(config: ServerConfig, fake_runner: FakeRunner) -> AdbBridge:
    return AdbBridge(config, runner=fake_runner)
