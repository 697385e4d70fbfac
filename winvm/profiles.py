"""Fixed hardware/firmware profiles for the supported guests."""

from __future__ import annotations

from typing import Dict

from winvm.exceptions import UnknownOSError
from winvm.models import OSFamily, OSProfile

PROFILES: Dict[str, OSProfile] = {
    "win95": OSProfile(
        key="win95",
        title="Windows 95",
        memory_mb=64,
        cpu_type="pentium_mmx",
        dos_version="7.0",
        default_disk_mb=2048,
        voodoo=True,
        family=OSFamily.LEGACY_COPY_INSTALL,
        medium_name="Win95.iso",
        setup_dir="WIN95",
        setup_command="SETUP",
    ),
    "win98": OSProfile(
        key="win98",
        title="Windows 98",
        memory_mb=128,
        cpu_type="pentium_mmx",
        dos_version="7.1",
        default_disk_mb=8192,
        voodoo=True,
        family=OSFamily.LEGACY_COPY_INSTALL,
        medium_name="Win98SE.iso",
        setup_dir="WIN98",
        setup_command="SETUP /IS",
    ),
    "winnt4": OSProfile(
        key="winnt4",
        title="Windows NT 4.0",
        memory_mb=128,
        cpu_type="pentium",
        dos_version="7.1",
        default_disk_mb=4096,
        voodoo=False,
        family=OSFamily.FLOPPY_BOOT,
        medium_name="WinNT4.iso",
    ),
    "win2000": OSProfile(
        key="win2000",
        title="Windows 2000",
        memory_mb=192,
        cpu_type="pentium2",
        dos_version="7.1",
        default_disk_mb=8192,
        voodoo=False,
        family=OSFamily.CD_NATIVE_BOOT,
        medium_name="Win2000.iso",
    ),
}


def resolve(os_key: str) -> OSProfile:
    profile = PROFILES.get(os_key)
    if profile is None:
        raise UnknownOSError(os_key, PROFILES.keys())
    return profile
