"""Tests for winvm.volume module."""

from __future__ import annotations

import os

import pytest

from winvm.exceptions import DirectoryNotWritableError, InvalidSizeError, VolumeCreationFailedError
from winvm.volume import VolumeManager, check_writable, fat_type_for, normalize_size

from conftest import FakeEmulator


class TestNormalizeSize:
    @pytest.mark.parametrize(
        "value,expected",
        [("hd_2gig", 2048), ("hd_4gig", 4096), ("hd_8gig", 8192), ("small", 2048), ("medium", 4096), ("large", 8192)],
    )
    def test_templates(self, value, expected):
        assert normalize_size(value) == expected

    def test_unknown_template_falls_back_to_medium(self, capsys):
        assert normalize_size("hd_16gig") == 4096
        assert "hd_16gig" in capsys.readouterr().out

    def test_template_case_insensitive(self):
        assert normalize_size("HD_8GIG") == 8192

    def test_literal_megabytes(self):
        assert normalize_size("3000") == 3000
        assert normalize_size(512) == 512

    @pytest.mark.parametrize("value", ["0", 0, -5, "-5"])
    def test_non_positive_sizes_rejected(self, value):
        with pytest.raises(InvalidSizeError):
            normalize_size(value)


class TestFatType:
    def test_threshold_inclusive_on_fat16_side(self):
        assert fat_type_for(2048) == 16
        assert fat_type_for(2049) == 32

    def test_small_and_large(self):
        assert fat_type_for(500) == 16
        assert fat_type_for(8192) == 32


class TestCheckWritable:
    def test_probe_file_removed(self, tmp_path):
        check_writable(tmp_path)
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permissions")
    def test_read_only_directory(self, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0o500)
        try:
            with pytest.raises(DirectoryNotWritableError, match=str(locked)):
                check_writable(locked)
        finally:
            locked.chmod(0o700)


class TestEnsureVolume:
    def test_creates_image_with_fat16(self, settings, fake_emulator, tmp_path):
        vm_dir = tmp_path / "vm"
        volume = VolumeManager(fake_emulator).ensure_volume(vm_dir, "hd_2gig")
        assert volume.path == vm_dir / "hdd.img"
        assert volume.size_mb == 2048
        assert volume.fat_type == 16
        assert volume.path.exists()
        (_, commands), = fake_emulator.sessions
        assert commands == [f'IMGMAKE "{vm_dir / "hdd.img"}" -t hd -size 2048 -fat 16', "EXIT"]

    def test_large_volume_uses_fat32(self, fake_emulator, tmp_path):
        VolumeManager(fake_emulator).ensure_volume(tmp_path / "vm", 8192)
        (_, commands), = fake_emulator.sessions
        assert "-size 8192 -fat 32" in commands[0]

    def test_second_call_is_a_no_op(self, fake_emulator, tmp_path):
        vm_dir = tmp_path / "vm"
        manager = VolumeManager(fake_emulator)
        manager.ensure_volume(vm_dir, 2048)
        image = vm_dir / "hdd.img"
        image.write_bytes(b"guest data")
        manager.ensure_volume(vm_dir, 8192)
        assert len(fake_emulator.sessions) == 1
        assert image.read_bytes() == b"guest data"

    def test_missing_image_after_session_is_fatal(self, settings, tmp_path):
        emulator = FakeEmulator(settings, create_images=False)
        vm_dir = tmp_path / "vm"
        with pytest.raises(VolumeCreationFailedError) as exc:
            VolumeManager(emulator).ensure_volume(vm_dir, 2048)
        assert exc.value.transcript == vm_dir / "last-dosboxx.log"
        assert "last-dosboxx.log" in str(exc.value)
        assert len(emulator.sessions) == 1

    def test_unwritable_directory_skips_emulator(self, fake_emulator, tmp_path, monkeypatch):
        def deny(vm_dir):
            raise DirectoryNotWritableError(vm_dir)

        monkeypatch.setattr("winvm.volume.check_writable", deny)
        with pytest.raises(DirectoryNotWritableError):
            VolumeManager(fake_emulator).ensure_volume(tmp_path / "vm", 2048)
        assert fake_emulator.sessions == []
