"""DOSBox-X process handling: scripted sessions with transcripts, and handoff.

Every session truncates ``<vm_dir>/last-<tool>.log`` and writes a header, the
combined stdout/stderr of the emulator, then a trailing ``=== exit N ===``
marker. A transcript without that marker belongs to a session that did not
finish cleanly (interrupted or killed).
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NamedTuple, Optional

from winvm.constants import EXIT_MARKER_RE, TRANSCRIPT_SEPARATOR, TRANSCRIPT_TOOL
from winvm.exceptions import EmulatorNotFoundError
from winvm.models import Settings
from winvm.utils import ensure_directory, log


class Session(NamedTuple):
    transcript: Path
    returncode: int


def transcript_path(vm_dir: Path, tool: str = TRANSCRIPT_TOOL) -> Path:
    return vm_dir / f"last-{tool}.log"


def transcript_exit_code(path: Path) -> Optional[int]:
    """Return the recorded exit status, or None when the trailing marker is absent."""
    try:
        lines = path.read_text(errors="replace").splitlines()
    except OSError:
        return None
    for line in reversed(lines):
        if not line.strip():
            continue
        match = EXIT_MARKER_RE.match(line.strip())
        return int(match.group(1)) if match else None
    return None


def transcript_completed(path: Path) -> bool:
    return transcript_exit_code(path) is not None


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class Emulator:
    """Thin wrapper around the emulator binary named in the settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def binary(self) -> str:
        return self.settings.emulator_binary

    def locate(self) -> Optional[str]:
        return shutil.which(self.binary)

    def ensure_present(self) -> str:
        found = self.locate()
        if not found:
            raise EmulatorNotFoundError(self.binary)
        log("DEBUG", f"Using emulator at {found}")
        return found

    def run_session(self, vm_dir: Path, commands: List[str], tool: str = TRANSCRIPT_TOOL) -> Session:
        """Run the emulator with ``-c`` directives, blocking until it exits."""
        ensure_directory(vm_dir)
        args: List[str] = []
        for command in commands:
            args.extend(["-c", command])
        cmd = [self.binary] + args
        transcript = transcript_path(vm_dir, tool)
        log("DEBUG", f"Running: {' '.join(cmd)} (transcript: {transcript})")

        with open(transcript, "w", encoding="utf-8") as out:
            out.write(f"=== {_utc_now()} ===\n")
            out.write(f"cmd: {' '.join(cmd)}\n")
            out.write(f"cwd: {os.getcwd()}\n")
            out.write(f"{TRANSCRIPT_SEPARATOR}\n")
            out.flush()
            try:
                proc = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    errors="replace",
                )
            except FileNotFoundError:
                raise EmulatorNotFoundError(self.binary)
            try:
                assert proc.stdout is not None
                for line in proc.stdout:
                    out.write(line)
                    out.flush()
                    if self.settings.verbose:
                        sys.stdout.write(line)
                        sys.stdout.flush()
                returncode = proc.wait()
            except BaseException:
                proc.kill()
                proc.wait()
                raise
            out.write(f"=== exit {returncode} ===\n")
        if returncode != 0:
            log("DEBUG", f"{self.binary} exited with status {returncode}")
        return Session(transcript=transcript, returncode=returncode)

    def handoff(self, conf_path: Path) -> None:
        """Replace the current process with the emulator running ``conf_path``."""
        binary = self.ensure_present()
        log("INFO", f"Launching {self.binary} -conf {conf_path}")
        sys.stdout.flush()
        sys.stderr.flush()
        os.execv(binary, [self.binary, "-conf", str(conf_path)])
