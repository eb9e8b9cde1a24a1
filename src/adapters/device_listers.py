"""Device listing strategies.

Two interchangeable implementations of `DeviceLister`:
- `XctraceDeviceLister`: `xcrun xctrace list devices` (simulators and
  connected physical devices, human-readable sections).
- `SimctlJsonDeviceLister`: `xcrun simctl list devices --json` (simulators
  only, grouped by runtime).
"""

from __future__ import annotations

from adapters.parsers import parse_device_json, parse_device_text
from core.config import AppSettings, DeviceListerKind
from core.interfaces.toolchain import CommandRunner, DeviceLister


class XctraceDeviceLister(DeviceLister):
    def __init__(self, runner: CommandRunner, settings: AppSettings | None = None) -> None:
        self._runner = runner
        self._settings = settings or AppSettings()

    def list_devices(self) -> dict[str, str]:
        argv = [self._settings.xcrun_bin, "xctrace", "list", "devices"]
        # Some Xcode releases print this listing on stderr.
        output = self._runner.run(argv).stdout
        return parse_device_text(output, strict=self._settings.strict_device_ids)


class SimctlJsonDeviceLister(DeviceLister):
    def __init__(self, runner: CommandRunner, settings: AppSettings | None = None) -> None:
        self._runner = runner
        self._settings = settings or AppSettings()

    def list_devices(self) -> dict[str, str]:
        argv = [self._settings.xcrun_bin, "simctl", "list", "devices", "--json"]
        output = self._runner.run(argv, merge_stderr=False).stdout
        return parse_device_json(output)


_LISTERS: dict[DeviceListerKind, type] = {
    DeviceListerKind.XCTRACE: XctraceDeviceLister,
    DeviceListerKind.SIMCTL: SimctlJsonDeviceLister,
}


def build_device_lister(
    kind: DeviceListerKind,
    runner: CommandRunner,
    settings: AppSettings | None = None,
) -> DeviceLister:
    return _LISTERS[kind](runner, settings)
