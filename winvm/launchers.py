"""Executable launcher stubs under ``<base>/bin``."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Dict

from winvm.constants import MODE_INSTALL, MODE_RUN
from winvm.models import Settings
from winvm.utils import ensure_directory, log

LAUNCHER_SUFFIXES = {MODE_INSTALL: "install", MODE_RUN: "start"}


def launcher_path(settings: Settings, os_key: str, mode: str) -> Path:
    return settings.bin_dir / f"{os_key}-{LAUNCHER_SUFFIXES[mode]}"


def render_launcher(settings: Settings, conf_path: Path) -> str:
    return (
        "#!/usr/bin/env bash\n"
        f"exec {shlex.quote(settings.emulator_binary)} -conf {shlex.quote(str(conf_path))} \"$@\"\n"
    )


def write_launchers(settings: Settings, os_key: str) -> Dict[str, Path]:
    """Write both stubs; each points at its mode's config whether or not it exists yet."""
    ensure_directory(settings.bin_dir)
    written: Dict[str, Path] = {}
    for mode in (MODE_INSTALL, MODE_RUN):
        path = launcher_path(settings, os_key, mode)
        path.write_text(render_launcher(settings, settings.conf_path(os_key, mode)))
        path.chmod(0o755)
        written[mode] = path
    log("INFO", f"Launchers: {written[MODE_INSTALL]} | {written[MODE_RUN]}")
    return written
