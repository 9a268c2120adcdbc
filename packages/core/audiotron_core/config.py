"""Persistent daemon settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1


@dataclass
class DeviceConfig:
    port: str | None = None
    baud: int = 115200


@dataclass
class ProtocolConfig:
    command_timeout_ms: int = 250
    packet_timeout_ms: int = 250
    report_queue_size: int = 64


@dataclass
class DisplayConfig:
    brightness: int = 20
    keypad_brightness: int = 0
    twelve_hour: bool = True


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    device: DeviceConfig = field(default_factory=DeviceConfig)
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Audiotron"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Audiotron"
    return Path.home() / ".config" / "audiotron"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _clamp(value: Any, lo: int, hi: int, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(lo, min(hi, number))


def _normalize_device(cfg: AppConfig) -> None:
    if not cfg.device.port:
        cfg.device.port = None
    cfg.device.baud = _clamp(cfg.device.baud, 1200, 921600, DeviceConfig.baud)


def _normalize_protocol(cfg: AppConfig) -> None:
    p = cfg.protocol
    p.command_timeout_ms = _clamp(p.command_timeout_ms, 50, 5000, ProtocolConfig.command_timeout_ms)
    p.packet_timeout_ms = _clamp(p.packet_timeout_ms, 50, 5000, ProtocolConfig.packet_timeout_ms)
    p.report_queue_size = _clamp(p.report_queue_size, 1, 4096, ProtocolConfig.report_queue_size)


def _normalize_display(cfg: AppConfig) -> None:
    d = cfg.display
    d.brightness = _clamp(d.brightness, 0, 100, DisplayConfig.brightness)
    d.keypad_brightness = _clamp(d.keypad_brightness, 0, 100, DisplayConfig.keypad_brightness)
    d.twelve_hour = bool(d.twelve_hour)


def _normalize_diagnostics(cfg: AppConfig) -> None:
    cfg.diagnostics.keep_log_files = _clamp(cfg.diagnostics.keep_log_files, 1, 365, DiagnosticsConfig.keep_log_files)


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=CONFIG_VERSION,
        device=_merge(DeviceConfig, raw.get("device", {})),
        protocol=_merge(ProtocolConfig, raw.get("protocol", {})),
        display=_merge(DisplayConfig, raw.get("display", {})),
        diagnostics=_merge(DiagnosticsConfig, raw.get("diagnostics", {})),
    )

    _normalize_device(cfg)
    _normalize_protocol(cfg)
    _normalize_display(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
