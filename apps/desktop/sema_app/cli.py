"""CLI entrypoints for the sema indicator window, probes and headless rendering."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from importlib import metadata
from pathlib import Path

from sema_core import (
    AppConfig,
    ImageFileSurface,
    MemorySurface,
    build_doctor_payload,
    load_config,
    open_session,
    run_headless,
)
from sema_core.logging_setup import configure_logging
from sema_renderer import CompositeSample, frame_to_image


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _installed_version() -> str:
    try:
        return metadata.version("sema")
    except Exception:
        return "0.1.0"


def cmd_run(args: argparse.Namespace, cfg: AppConfig) -> int:
    from .app import run_gui

    return run_gui(cfg)


def cmd_probe(args: argparse.Namespace, cfg: AppConfig) -> int:
    session = open_session(cfg)
    snapshot = session.sample()

    slots = {}
    for name, sample in snapshot.samples.items():
        if isinstance(sample, CompositeSample):
            slots[name] = {
                "kind": "composite",
                "segments": [
                    {"start": seg.start, "stop": seg.stop, "color": list(seg.color)} for seg in sample.segments
                ],
            }
        else:
            slots[name] = {"kind": "fill", "fraction": sample.fraction, "color": list(sample.color)}

    _print_json(
        {
            "timestamp": snapshot.timestamp.isoformat(),
            "degraded": snapshot.degraded,
            "failures": snapshot.failures,
            "slots": slots,
        }
    )
    return 0


def cmd_snapshot(args: argparse.Namespace, cfg: AppConfig) -> int:
    session = open_session(cfg)
    surface = MemorySurface(keep=1)
    session.indicator(surface).refresh(session.sample())

    out = Path(args.out).expanduser().resolve()
    out.parent.mkdir(parents=True, exist_ok=True)
    frame_to_image(surface.last, args.scale).save(out, format="PNG")
    _print_json({"path": str(out), "width": surface.last.width, "height": surface.last.height})
    return 0


def cmd_watch(args: argparse.Namespace, cfg: AppConfig) -> int:
    session = open_session(cfg)
    surface = ImageFileSurface(Path(args.out).expanduser().resolve(), scale=args.scale)
    rc = run_headless(session, surface, ticks=args.ticks)
    _print_json({"path": str(surface.path), "frames": surface.presented, "exit_code": rc})
    return rc


def cmd_doctor(args: argparse.Namespace, cfg: AppConfig) -> int:
    payload = build_doctor_payload(cfg)
    payload["version"] = _installed_version()
    _print_json(payload)
    return 0


def cmd_config(args: argparse.Namespace, cfg: AppConfig) -> int:
    _print_json(asdict(cfg))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sema", description="Always-on-top status indicator bars")
    parser.add_argument("--config", default=None, help="Optional config file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="Show the indicator window")
    run_cmd.set_defaults(func=cmd_run)

    probe_cmd = sub.add_parser("probe", help="Sample every indicator once and print the result")
    probe_cmd.set_defaults(func=cmd_probe)

    snap_cmd = sub.add_parser("snapshot", help="Render one frame to a PNG file")
    snap_cmd.add_argument("--out", default="sema.png", help="Output PNG path")
    snap_cmd.add_argument("--scale", type=int, default=4, choices=[1, 2, 4, 8])
    snap_cmd.set_defaults(func=cmd_snapshot)

    watch_cmd = sub.add_parser("watch", help="Run the refresh loop headless, rewriting a PNG each frame")
    watch_cmd.add_argument("--out", default="sema.png", help="Output PNG path")
    watch_cmd.add_argument("--ticks", type=int, default=5, help="Refreshes to run before exiting")
    watch_cmd.add_argument("--scale", type=int, default=4, choices=[1, 2, 4, 8])
    watch_cmd.set_defaults(func=cmd_watch)

    doctor_cmd = sub.add_parser("doctor", help="Print environment and probe command availability")
    doctor_cmd.set_defaults(func=cmd_doctor)

    config_cmd = sub.add_parser("config", help="Print the effective configuration")
    config_cmd.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = load_config(Path(args.config).expanduser() if args.config else None)
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=args.verbose, verbose=args.verbose)
    return int(args.func(args, cfg))


if __name__ == "__main__":
    raise SystemExit(main())
