"""Virtual hard-disk volume creation."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from winvm.constants import (
    FALLBACK_SIZE_MB,
    FAT16_MAX_MB,
    SIZE_LITERAL_RE,
    SIZE_TEMPLATES,
    VOLUME_FILE_NAME,
    WRITE_PROBE_NAME,
)
from winvm.emulator import Emulator
from winvm.exceptions import DirectoryNotWritableError, InvalidSizeError, VolumeCreationFailedError
from winvm.models import Volume
from winvm.utils import log


def normalize_size(size: Union[int, str]) -> int:
    """Turn a MB count or a symbolic template (hd_2gig, ...) into megabytes.

    Unrecognised templates fall back to 4096 MB with a warning instead of
    failing.
    """
    if isinstance(size, int) and not isinstance(size, bool):
        if size <= 0:
            raise InvalidSizeError(str(size))
        return size
    raw = str(size).strip()
    if SIZE_LITERAL_RE.match(raw):
        value = int(raw)
        if value <= 0:
            raise InvalidSizeError(raw)
        return value
    key = raw.lower()
    if key in SIZE_TEMPLATES:
        return SIZE_TEMPLATES[key]
    if key.lstrip("-").isdigit():
        raise InvalidSizeError(raw)
    log("WARN", f"Unrecognised size template '{raw}'; using {FALLBACK_SIZE_MB} MB")
    return FALLBACK_SIZE_MB


def fat_type_for(size_mb: int) -> int:
    return 16 if size_mb <= FAT16_MAX_MB else 32


def check_writable(directory: Path) -> None:
    probe = directory / WRITE_PROBE_NAME
    try:
        directory.mkdir(parents=True, exist_ok=True)
        probe.touch()
        probe.unlink()
    except OSError:
        raise DirectoryNotWritableError(directory)


class VolumeManager:
    def __init__(self, emulator: Emulator) -> None:
        self.emulator = emulator

    def ensure_volume(self, vm_dir: Path, size: Union[int, str]) -> Volume:
        """Create ``<vm_dir>/hdd.img`` unless it already exists.

        An existing image is never touched; its size and FAT type are reported
        from the requested size, not read back from the file.
        """
        size_mb = normalize_size(size)
        fat_type = fat_type_for(size_mb)
        image = vm_dir / VOLUME_FILE_NAME
        volume = Volume(path=image, size_mb=size_mb, fat_type=fat_type)
        if image.exists():
            log("INFO", f"HDD image already exists: {image}")
            return volume

        check_writable(vm_dir)
        log("INFO", f"Creating HDD image ({size_mb} MB, FAT{fat_type})...")
        session = self.emulator.run_session(
            vm_dir,
            [f'IMGMAKE "{image}" -t hd -size {size_mb} -fat {fat_type}', "EXIT"],
        )
        if not image.exists():
            raise VolumeCreationFailedError(image, session.transcript)
        log("SUCCESS", f"Created {image}")
        return volume
