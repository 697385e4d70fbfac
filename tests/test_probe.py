"""Tests for winvm.probe module."""

from __future__ import annotations

from pathlib import Path

import pytest

from winvm.models import BootClass
from winvm.probe import CachingMediumProbe, MediumProbe, TranscriptMediumProbe, classify_transcript

from conftest import FakeEmulator

NO_BOOT = "El Torito CD-ROM boot record not found.\n"


class TestClassifyTranscript:
    def test_signature_means_not_bootable(self):
        assert classify_transcript("IMGMOUNT ok\n" + NO_BOOT) is BootClass.NOT_BOOTABLE

    def test_signature_match_ignores_case(self):
        assert classify_transcript(NO_BOOT.upper()) is BootClass.NOT_BOOTABLE

    def test_no_signature_means_bootable(self):
        assert classify_transcript("Drive A is mounted as El Torito floppy\n") is BootClass.BOOTABLE

    def test_incomplete_run_is_inconclusive(self):
        assert classify_transcript("partial output", completed=False) is BootClass.INCONCLUSIVE

    def test_signature_wins_over_incomplete_run(self):
        assert classify_transcript(NO_BOOT, completed=False) is BootClass.NOT_BOOTABLE


class TestTranscriptMediumProbe:
    def test_bootable_medium(self, settings, tmp_path):
        emulator = FakeEmulator(settings, output="Drive A: El Torito emulation\n")
        probe = TranscriptMediumProbe(emulator, tmp_path / "scratch")
        assert probe.classify(tmp_path / "Win98SE.iso") is BootClass.BOOTABLE
        assert probe.is_bootable(tmp_path / "Win98SE.iso") is True

    def test_non_bootable_medium(self, settings, tmp_path):
        emulator = FakeEmulator(settings, output=NO_BOOT)
        probe = TranscriptMediumProbe(emulator, tmp_path / "scratch")
        assert probe.classify(tmp_path / "Win95.iso") is BootClass.NOT_BOOTABLE
        assert probe.is_bootable(tmp_path / "Win95.iso") is False

    def test_interrupted_session_is_not_treated_as_bootable(self, settings, tmp_path):
        emulator = FakeEmulator(settings, complete=False)
        probe = TranscriptMediumProbe(emulator, tmp_path / "scratch")
        assert probe.classify(tmp_path / "Win98SE.iso") is BootClass.INCONCLUSIVE
        assert probe.is_bootable(tmp_path / "Win98SE.iso") is False

    def test_session_directives(self, settings, tmp_path):
        emulator = FakeEmulator(settings)
        iso = tmp_path / "Win98SE.iso"
        TranscriptMediumProbe(emulator, tmp_path / "scratch").classify(iso)
        (_, commands), = emulator.sessions
        assert commands == [f'IMGMOUNT D "{iso}" -t iso -ide 2m', "IMGMOUNT A -bootcd D", "EXIT"]

    def test_scratch_directory_discarded(self, settings, tmp_path):
        emulator = FakeEmulator(settings, output=NO_BOOT)
        scratch_root = tmp_path / "scratch"
        TranscriptMediumProbe(emulator, scratch_root).classify(tmp_path / "Win95.iso")
        scratch_dir, _ = emulator.sessions[0]
        assert scratch_dir.parent == scratch_root
        assert not scratch_dir.exists()
        assert list(scratch_root.iterdir()) == []

    def test_os_error_is_inconclusive(self, settings, tmp_path, monkeypatch):
        emulator = FakeEmulator(settings)

        def broken(*args, **kwargs):
            raise PermissionError("denied")

        monkeypatch.setattr(emulator, "run_session", broken)
        probe = TranscriptMediumProbe(emulator, tmp_path / "scratch")
        assert probe.classify(tmp_path / "Win95.iso") is BootClass.INCONCLUSIVE


class _CountingProbe(MediumProbe):
    def __init__(self, answer: BootClass) -> None:
        self.answer = answer
        self.calls = []

    def classify(self, path: Path) -> BootClass:
        self.calls.append(path)
        return self.answer


class TestCachingMediumProbe:
    def test_memoizes_per_path(self, tmp_path):
        inner = _CountingProbe(BootClass.BOOTABLE)
        probe = CachingMediumProbe(inner)
        iso = tmp_path / "Win98SE.iso"
        assert probe.is_bootable(iso) is True
        assert probe.is_bootable(iso) is True
        assert len(inner.calls) == 1

    def test_distinct_paths_probed_separately(self, tmp_path):
        inner = _CountingProbe(BootClass.NOT_BOOTABLE)
        probe = CachingMediumProbe(inner)
        probe.classify(tmp_path / "a.iso")
        probe.classify(tmp_path / "b.iso")
        assert len(inner.calls) == 2

    def test_base_probe_is_abstract(self, tmp_path):
        with pytest.raises(NotImplementedError):
            MediumProbe().classify(tmp_path / "a.iso")
