"""CLI entry points for winvm."""

from __future__ import annotations

import argparse
import dataclasses
import traceback
from pathlib import Path
from typing import List, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from winvm.config import parse_env
from winvm.exceptions import ManagerError
from winvm.models import Settings
from winvm.orchestrator import Orchestrator
from winvm.profiles import PROFILES
from winvm.utils import log, set_verbose


def list_profiles() -> None:
    """Print the supported guests and exit."""
    max_key = max(len(k) for k in PROFILES)
    for key in sorted(PROFILES):
        profile = PROFILES[key]
        print(
            f"  {key:<{max_key}}  {profile.title}  (memory={profile.memory_mb} MB, "
            f"disk={profile.default_disk_mb} MB, install={profile.family.value}, medium={profile.medium_name})"
        )


def show_config(settings: Settings) -> None:
    """Print the resolved settings as YAML and exit."""
    data = {}
    for field in dataclasses.fields(settings):
        value = getattr(settings, field.name)
        data[field.name] = str(value) if isinstance(value, Path) else value
    print(yaml.safe_dump(data, default_flow_style=False, sort_keys=True), end="")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="winvm",
        description="Persistent DOSBox-X VMs for Windows 95, 98, NT4 and 2000",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging and emulator output on the terminal")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    sub.add_parser("setup", help="Create folders and check for DOSBox-X")

    new = sub.add_parser("new", help="Create a VM folder, HDD image, run config and launchers")
    new.add_argument("os_key", metavar="OS", help="win95, win98, winnt4 or win2000")
    new.add_argument("size", nargs="?", default=None, help="Size in MB or a template (hd_2gig, hd_4gig, hd_8gig)")

    install = sub.add_parser("install", help="Write install/run configs and start the installer")
    install.add_argument("os_key", metavar="OS")
    install.add_argument("--no-launch", action="store_true", help="Write everything but do not start DOSBox-X")

    start = sub.add_parser("start", help="Boot the installed HDD image")
    start.add_argument("os_key", metavar="OS")

    attach = sub.add_parser("attach-medium", aliases=["attach-iso"], help="Copy a local ISO into the media folder")
    attach.add_argument("os_key", metavar="OS")
    attach.add_argument("path", type=Path)

    sub.add_parser("profiles", help="List supported guests")
    sub.add_parser("show-config", help="Show resolved settings")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "profiles":
        list_profiles()
        return 0

    try:
        settings = parse_env()
    except ManagerError as exc:
        log("ERROR", str(exc))
        return 1
    if args.debug:
        settings.verbose = True
    set_verbose(settings.verbose)

    if args.command == "show-config":
        show_config(settings)
        return 0

    orchestrator = Orchestrator(settings)
    try:
        if args.command == "setup":
            orchestrator.setup()
        elif args.command == "new":
            orchestrator.new(args.os_key, args.size)
        elif args.command == "install":
            orchestrator.install(args.os_key, launch=not args.no_launch)
        elif args.command == "start":
            orchestrator.start(args.os_key)
        elif args.command in ("attach-medium", "attach-iso"):
            orchestrator.attach_medium(args.os_key, args.path)
        return 0
    except ManagerError as exc:
        log("ERROR", str(exc))
        return 1
    except KeyboardInterrupt:
        log("WARN", "Interrupted")
        return 130
    except Exception as exc:
        log("ERROR", f"Unexpected error: {exc}")
        traceback.print_exc()
        return 1
