"""Parsers for xcodebuild / simctl / xctrace output.

All functions are pure: they take the raw text a command printed and return
structured values, raising the matching `XcodeRunnerError` subclass when the
output does not have the expected shape.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from core.domain.models import BuildSettings, Device
from core.errors import MissingBuildSetting, NoDevicesFound, NoSchemesFound, ParseFailed

SCHEMES_MARKER = "Schemes:"

SECTION_PREFIX = "== "
DEVICE_SECTIONS = frozenset({"== Devices ==", "== Simulators =="})
OFFLINE_SECTION = "== Devices Offline =="

_UDID_LINE_RE = re.compile(
    r"^(.+) \(([A-F0-9]{8}-[A-F0-9]{4}-[A-F0-9]{4}-[A-F0-9]{4}-[A-F0-9]{12}|[0-9]{8}-[0-9]{16})\)$"
)
_HEX_CHARS = frozenset("0123456789ABCDEF")


def parse_schemes(text: str) -> list[str]:
    """Return the scheme names listed after the `Schemes:` header, in order."""

    schemes: list[str] = []
    collecting = False
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if collecting and line:
            schemes.append(line)
        if SCHEMES_MARKER in line:
            collecting = True
    if not schemes:
        raise NoSchemesFound("No schemes found in `xcodebuild -list` output")
    return schemes


def _decode_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseFailed(f"Invalid JSON in {what}: {exc}") from exc


def parse_device_json(text: str) -> dict[str, str]:
    """Build the registry from `simctl list devices --json` output.

    Groups (runtimes) are flattened in document order; unavailable devices
    are dropped and a repeated name keeps the last identifier seen.
    """

    data = _decode_json(text, "device listing")
    groups = data.get("devices") if isinstance(data, dict) else None
    if not isinstance(groups, dict):
        raise ParseFailed("Device listing has no 'devices' mapping")

    registry: dict[str, str] = {}
    for group, records in groups.items():
        if not isinstance(records, list):
            raise ParseFailed(f"Device group {group!r} is not a list")
        for record in records:
            # Unavailable records are dropped before validation; they may lack a udid.
            if isinstance(record, dict) and not record.get("isAvailable"):
                continue
            try:
                device = Device.model_validate(record)
            except ValidationError as exc:
                raise ParseFailed(f"Malformed device record in {group!r}: {exc}") from exc
            if device.is_available:
                registry[device.name] = device.udid

    if not registry:
        raise NoDevicesFound("No available simulators found")
    return registry


def _looks_like_identifier(udid: str) -> bool:
    # Permissive: accepts anything with a hyphen or a hex digit.
    return bool(udid) and ("-" in udid or any(ch in _HEX_CHARS for ch in udid))


def parse_device_text(text: str, *, strict: bool = False) -> dict[str, str]:
    """Build the registry from `xctrace list devices` output.

    Only the "Devices" and "Simulators" sections are read. With `strict`,
    lines whose identifier is not UUID-shaped are ignored.
    """

    registry: dict[str, str] = {}
    section = ""
    for line in text.splitlines():
        if line.startswith(SECTION_PREFIX):
            section = line.strip()
            continue
        if not line.strip() or section == OFFLINE_SECTION:
            continue
        if section not in DEVICE_SECTIONS:
            continue

        line = line.rstrip()
        paren = line.rfind("(")
        if paren == -1:
            continue
        udid = line[paren + 1 :].removesuffix(")")
        name = line[:paren].rstrip()

        # "iPhone 15 Simulator (17.2)" -> "iPhone 15 Simulator"
        version_paren = name.rfind("(")
        if version_paren != -1:
            name = name[:version_paren].strip()
        if not name:
            continue

        if _UDID_LINE_RE.match(line) or (not strict and _looks_like_identifier(udid)):
            registry[name] = udid

    if not registry:
        raise NoDevicesFound("No available devices or simulators found")
    return registry


def parse_build_settings(text: str) -> BuildSettings:
    """Extract the fields the deploy step needs from `-showBuildSettings -json`."""

    data = _decode_json(text, "build settings")
    if not isinstance(data, list):
        raise ParseFailed("Build settings output is not a list")
    if not data:
        raise ParseFailed("Unable to find the required build settings")

    first = data[0]
    settings = first.get("buildSettings") if isinstance(first, dict) else None
    if not isinstance(settings, dict):
        raise ParseFailed("First build settings record has no 'buildSettings' mapping")

    try:
        return BuildSettings.model_validate(settings)
    except ValidationError as exc:
        fields = [str(err["loc"][0]) for err in exc.errors() if err.get("loc")]
        raise MissingBuildSetting(fields or ["buildSettings"]) from exc
