"""Data models for winvm."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from winvm.constants import (
    BIN_DIR_NAME,
    BOOT_DIR_NAME,
    DEFAULT_BASE_DIR,
    DEFAULT_EMULATOR,
    ISOS_DIR_NAME,
    NT_BOOT_FLOPPY_NAME,
    VMS_DIR_NAME,
    VOLUME_FILE_NAME,
)


class OSFamily(Enum):
    """How a guest gets its installer running."""

    CD_NATIVE_BOOT = "cd-native-boot"
    FLOPPY_BOOT = "floppy-boot"
    LEGACY_COPY_INSTALL = "legacy-copy-install"


class BootClass(Enum):
    BOOTABLE = "bootable"
    NOT_BOOTABLE = "not-bootable"
    INCONCLUSIVE = "inconclusive"


@dataclass(frozen=True)
class OSProfile:
    key: str
    title: str
    memory_mb: int
    cpu_type: str
    dos_version: str
    default_disk_mb: int
    voodoo: bool
    family: OSFamily
    medium_name: str
    install_core: str = "normal"
    run_core: str = "dynamic_x86"
    setup_dir: Optional[str] = None
    setup_command: Optional[str] = None


@dataclass(frozen=True)
class Volume:
    path: Path
    size_mb: int
    fat_type: int


@dataclass
class Settings:
    base_dir: Path = DEFAULT_BASE_DIR
    verbose: bool = False
    emulator_binary: str = DEFAULT_EMULATOR
    auto_install_9x: bool = True
    install_methods: Dict[str, str] = field(default_factory=lambda: {"win95": "auto", "win98": "auto"})
    core_install: Optional[str] = None
    core_run: Optional[str] = None
    turbo_run: bool = False
    net_backend: str = ""
    net_irq: int = 10
    media_urls: Dict[str, str] = field(default_factory=dict)

    @property
    def vms_dir(self) -> Path:
        return self.base_dir / VMS_DIR_NAME

    @property
    def isos_dir(self) -> Path:
        return self.vms_dir / ISOS_DIR_NAME

    @property
    def boot_dir(self) -> Path:
        return self.vms_dir / BOOT_DIR_NAME

    @property
    def bin_dir(self) -> Path:
        return self.base_dir / BIN_DIR_NAME

    @property
    def nt_boot_floppy(self) -> Path:
        return self.boot_dir / NT_BOOT_FLOPPY_NAME

    def vm_dir(self, os_key: str) -> Path:
        return self.vms_dir / os_key

    def volume_path(self, os_key: str) -> Path:
        return self.vm_dir(os_key) / VOLUME_FILE_NAME

    def conf_path(self, os_key: str, mode: str) -> Path:
        return self.vm_dir(os_key) / f"{os_key}-{mode}.conf"

    def install_method(self, os_key: str) -> str:
        return self.install_methods.get(os_key, "auto")
