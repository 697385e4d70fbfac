"""Installation medium bootability probing.

Whether an ISO carries an El Torito boot record is decided by asking the
emulator to boot it in a throwaway directory and reading the transcript.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Dict

from winvm.constants import NO_BOOT_RECORD_SIGNATURE
from winvm.emulator import Emulator, transcript_completed
from winvm.models import BootClass
from winvm.utils import ensure_directory, log


def classify_transcript(text: str, completed: bool = True) -> BootClass:
    if NO_BOOT_RECORD_SIGNATURE.lower() in text.lower():
        return BootClass.NOT_BOOTABLE
    if not completed:
        return BootClass.INCONCLUSIVE
    return BootClass.BOOTABLE


class MediumProbe:
    """Classifies an optical image as bootable or not."""

    def classify(self, path: Path) -> BootClass:
        raise NotImplementedError

    def is_bootable(self, path: Path) -> bool:
        return self.classify(path) is BootClass.BOOTABLE


class TranscriptMediumProbe(MediumProbe):
    def __init__(self, emulator: Emulator, scratch_root: Path) -> None:
        self.emulator = emulator
        self.scratch_root = scratch_root

    def classify(self, path: Path) -> BootClass:
        ensure_directory(self.scratch_root)
        with tempfile.TemporaryDirectory(prefix="probe-", dir=self.scratch_root) as scratch:
            try:
                session = self.emulator.run_session(
                    Path(scratch),
                    [f'IMGMOUNT D "{path}" -t iso -ide 2m', "IMGMOUNT A -bootcd D", "EXIT"],
                )
            except OSError as exc:
                log("WARN", f"Could not probe {path} for a boot record: {exc}")
                return BootClass.INCONCLUSIVE
            text = session.transcript.read_text(errors="replace")
            result = classify_transcript(text, completed=transcript_completed(session.transcript))
        log("DEBUG", f"Boot record probe for {path}: {result.value}")
        return result


class CachingMediumProbe(MediumProbe):
    """Memoizes another probe's answers per path for the lifetime of this object."""

    def __init__(self, inner: MediumProbe) -> None:
        self.inner = inner
        self._results: Dict[Path, BootClass] = {}

    def classify(self, path: Path) -> BootClass:
        key = Path(path).resolve()
        if key not in self._results:
            self._results[key] = self.inner.classify(path)
        return self._results[key]
