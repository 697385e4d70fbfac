"""Shared test fixtures and a recording stand-in for the DOSBox-X binary."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from winvm.constants import TRANSCRIPT_SEPARATOR, TRANSCRIPT_TOOL
from winvm.emulator import Emulator, Session, transcript_path
from winvm.models import Settings
from winvm.utils import set_verbose


class FakeEmulator(Emulator):
    """Records sessions instead of spawning DOSBox-X.

    IMGMAKE directives create the named image unless ``create_images`` is off;
    ``output`` is written into the transcript as the emulator's own text.
    """

    def __init__(
        self,
        settings: Settings,
        output: str = "",
        create_images: bool = True,
        complete: bool = True,
        present: bool = True,
    ) -> None:
        super().__init__(settings)
        self.output = output
        self.create_images = create_images
        self.complete = complete
        self.present = present
        self.sessions: List[Tuple[Path, List[str]]] = []
        self.handoffs: List[Path] = []

    def locate(self) -> Optional[str]:
        return f"/usr/bin/{self.binary}" if self.present else None

    def run_session(self, vm_dir: Path, commands: List[str], tool: str = TRANSCRIPT_TOOL) -> Session:
        self.sessions.append((vm_dir, list(commands)))
        vm_dir.mkdir(parents=True, exist_ok=True)
        if self.create_images:
            for command in commands:
                if command.startswith("IMGMAKE"):
                    Path(command.split('"')[1]).write_bytes(b"\0" * 512)
        transcript = transcript_path(vm_dir, tool)
        text = f"=== 2026-01-01T00:00:00Z ===\ncmd: {self.binary}\ncwd: /\n{TRANSCRIPT_SEPARATOR}\n{self.output}"
        if self.complete:
            text += "=== exit 0 ===\n"
        transcript.write_text(text)
        return Session(transcript=transcript, returncode=0)

    def handoff(self, conf_path: Path) -> None:
        self.ensure_present()
        self.handoffs.append(conf_path)


@pytest.fixture(autouse=True)
def quiet_logging():
    set_verbose(False)
    yield
    set_verbose(False)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(base_dir=tmp_path / "dosboxx")


@pytest.fixture
def fake_emulator(settings) -> FakeEmulator:
    return FakeEmulator(settings)


# Every environment variable parse_env() reads, cleared for a clean slate.
_PARSE_ENV_VARS = [
    "DOSBOXX_HOME",
    "DOSBOXX_DEBUG",
    "DOSBOXX_BIN",
    "DOSBOXX_MEDIA_CONFIG",
    "AUTO_INSTALL_9X",
    "WIN95_METHOD",
    "WIN98_METHOD",
    "DOSBOXX_CORE_INSTALL",
    "DOSBOXX_CORE_RUN",
    "DOSBOXX_TURBO_RUN",
    "NET_BACKEND",
    "NET_IRQ",
    "WIN95_ISO_URL",
    "WIN98SE_ISO_URL",
    "WINNT4_ISO_URL",
    "WIN2000_ISO_URL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear every variable parse_env() reads and point DOSBOXX_HOME at a temp dir."""
    for key in _PARSE_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("DOSBOXX_HOME", str(tmp_path / "home"))
