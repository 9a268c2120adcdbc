"""CLI entrypoints for the audiotron daemon, device tools, replay, and previews."""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from audiotron_core import load_config, open_module
from audiotron_core.config import AppConfig
from audiotron_core.diagnostics import build_doctor_payload
from audiotron_core.logging_setup import configure_logging, install_crash_hooks
from audiotron_display import (
    CFA635Error,
    DisplayState,
    DisplayTransport,
    Module,
    Report,
    ReplayRunner,
    ReportTimeoutError,
    is_compatible,
    transliterate,
)
from audiotron_renderer import CLOCK_SPRITES, clock_view, parse_sprite_rows, put_wrapped, save_preview, sprite_from_image


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _config_for(args: argparse.Namespace) -> AppConfig:
    cfg = load_config()
    port = getattr(args, "port", None)
    if port:
        cfg.device.port = port
    return cfg


def _connect(args: argparse.Namespace) -> tuple[Module, str]:
    return open_module(_config_for(args))


def report_to_dict(report: Report) -> dict[str, object]:
    row: dict[str, object] = {"kind": type(report).__name__}
    for name, value in asdict(report).items():
        row[name] = value.name if hasattr(value, "name") else value
    return row


def cmd_run(args: argparse.Namespace) -> int:
    from .app import run_daemon

    install_crash_hooks()
    return run_daemon(_config_for(args))


def cmd_list_devices(_args: argparse.Namespace) -> int:
    devices = DisplayTransport.discover()
    _print_json(
        [
            {
                "device": d.device,
                "description": d.description,
                "hwid": d.hwid,
                "vid": d.vid,
                "pid": d.pid,
                "compatible": is_compatible(d),
            }
            for d in devices
        ]
    )
    return 0


def cmd_doctor(_args: argparse.Namespace) -> int:
    _print_json(build_doctor_payload(load_config()))
    return 0


def cmd_ping(args: argparse.Namespace) -> int:
    payload = args.payload.encode("utf-8")
    module, port = _connect(args)
    with module:
        start = time.perf_counter()
        module.ping(payload)
        elapsed_ms = (time.perf_counter() - start) * 1000
    _print_json({"success": True, "port": port, "payload_hex": payload.hex(), "round_trip_ms": elapsed_ms})
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    module, port = _connect(args)
    with module:
        module.clear()
    _print_json({"success": True, "port": port})
    return 0


def cmd_write(args: argparse.Namespace) -> int:
    data = transliterate(args.text)
    module, port = _connect(args)
    with module:
        if args.wrap:
            put_wrapped(module, args.col, args.row, data)
        else:
            module.write(args.col, args.row, data)
    _print_json({"success": True, "port": port, "bytes_hex": data.hex()})
    return 0


def cmd_backlight(args: argparse.Namespace) -> int:
    module, port = _connect(args)
    with module:
        module.set_backlight(args.lcd, args.keypad)
    _print_json({"success": True, "port": port, "lcd": args.lcd, "keypad": args.keypad})
    return 0


def cmd_led(args: argparse.Namespace) -> int:
    module, port = _connect(args)
    with module:
        module.set_led(args.index, args.color == "green", args.duty)
    _print_json({"success": True, "port": port, "index": args.index, "color": args.color, "duty": args.duty})
    return 0


def cmd_sprite(args: argparse.Namespace) -> int:
    rows = sprite_from_image(Path(args.image)) if args.image else parse_sprite_rows(args.rows)
    module, port = _connect(args)
    with module:
        module.set_sprite(args.index, rows)
    _print_json({"success": True, "port": port, "index": args.index, "rows": [f"0x{r:02X}" for r in rows]})
    return 0


def cmd_reports(args: argparse.Namespace) -> int:
    module, _port = _connect(args)
    deadline = time.monotonic() + args.seconds
    with module:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                report = module.read_report(timeout=remaining)
            except ReportTimeoutError:
                break
            if report is None:
                break
            print(json.dumps(report_to_dict(report), sort_keys=True), flush=True)
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    runner = ReplayRunner()
    report = runner.run(Path(args.transcript), strict=not args.no_strict)
    payload = asdict(report)
    payload["success"] = len(report.errors) == 0
    _print_json(payload)
    return 0 if not report.errors else 2


def cmd_preview(args: argparse.Namespace) -> int:
    sprites = None
    if args.text is not None:
        state = DisplayState()
        put_wrapped(state, 0, 0, transliterate(args.text))
    else:
        now = datetime.strptime(args.time, "%H:%M:%S") if args.time else datetime.now()
        state = clock_view(now, twelve_hour=not args.twenty_four_hour)
        sprites = CLOCK_SPRITES
    out = save_preview(state, Path(args.out).expanduser(), sprites=sprites, scale=args.scale)
    _print_json({"success": True, "out": str(out), "rows_hex": [bytes(r).hex() for r in state]})
    return 0


def _add_port(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--port", default=None, help="Serial port; auto-detected when omitted")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="audiotron", description="CFA635 clock daemon and device tools")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="Run the clock daemon")
    _add_port(run_cmd)
    run_cmd.set_defaults(func=cmd_run)

    list_cmd = sub.add_parser("list-devices", help="List serial devices")
    list_cmd.set_defaults(func=cmd_list_devices)

    doctor_cmd = sub.add_parser("doctor", help="Print diagnostics and detected devices")
    doctor_cmd.set_defaults(func=cmd_doctor)

    ping_cmd = sub.add_parser("ping", help="Ping the module and time the echo")
    _add_port(ping_cmd)
    ping_cmd.add_argument("--payload", default="audiotron", help="Up to 16 bytes to echo")
    ping_cmd.set_defaults(func=cmd_ping)

    clear_cmd = sub.add_parser("clear", help="Clear the LCD")
    _add_port(clear_cmd)
    clear_cmd.set_defaults(func=cmd_clear)

    write_cmd = sub.add_parser("write", help="Write text at a position")
    _add_port(write_cmd)
    write_cmd.add_argument("text")
    write_cmd.add_argument("--col", type=int, default=0)
    write_cmd.add_argument("--row", type=int, default=0)
    write_cmd.add_argument("--wrap", action="store_true", help="Continue onto following rows")
    write_cmd.set_defaults(func=cmd_write)

    backlight_cmd = sub.add_parser("backlight", help="Set LCD and keypad backlight")
    _add_port(backlight_cmd)
    backlight_cmd.add_argument("lcd", type=int)
    backlight_cmd.add_argument("--keypad", type=int, default=0)
    backlight_cmd.set_defaults(func=cmd_backlight)

    led_cmd = sub.add_parser("led", help="Set one half of a status LED")
    _add_port(led_cmd)
    led_cmd.add_argument("index", type=int, choices=range(4))
    led_cmd.add_argument("--color", choices=["red", "green"], default="green")
    led_cmd.add_argument("--duty", type=int, default=100)
    led_cmd.set_defaults(func=cmd_led)

    sprite_cmd = sub.add_parser("sprite", help="Define a custom character")
    _add_port(sprite_cmd)
    sprite_cmd.add_argument("index", type=int, choices=range(8))
    source = sprite_cmd.add_mutually_exclusive_group(required=True)
    source.add_argument("--rows", help="Eight row masks, e.g. '01,03,07,0f,1f,3f,3f,3f'")
    source.add_argument("--image", help="6x8 image file; dark pixels are lit")
    sprite_cmd.set_defaults(func=cmd_sprite)

    reports_cmd = sub.add_parser("reports", help="Print key, fan, and temperature reports as JSON lines")
    _add_port(reports_cmd)
    reports_cmd.add_argument("--seconds", type=float, default=30.0)
    reports_cmd.set_defaults(func=cmd_reports)

    replay_cmd = sub.add_parser("replay", help="Analyze captured serial transcript")
    replay_cmd.add_argument("--transcript", required=True, help="Path to JSONL transcript")
    replay_cmd.add_argument("--no-strict", action="store_true", help="Report framing failures without failing")
    replay_cmd.set_defaults(func=cmd_replay)

    preview_cmd = sub.add_parser("preview", help="Render the clock or some text to a PNG")
    preview_cmd.add_argument("--out", required=True)
    preview_cmd.add_argument("--time", default=None, help="HH:MM:SS to render instead of now")
    preview_cmd.add_argument("--text", default=None, help="Render wrapped text instead of the clock")
    preview_cmd.add_argument("--twenty-four-hour", action="store_true")
    preview_cmd.add_argument("--scale", type=int, default=4)
    preview_cmd.set_defaults(func=cmd_preview)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(keep_files=load_config().diagnostics.keep_log_files, console=args.command == "run")
    try:
        return int(args.func(args))
    except CFA635Error as exc:
        _print_json({"success": False, "error": str(exc), "error_type": type(exc).__name__})
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
