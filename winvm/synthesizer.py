"""DOSBox-X configuration synthesis for install and run modes.

Output is a pure function of its inputs: the same profile, mode, settings,
paths and bootability hint always produce byte-identical text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from winvm.constants import CAPTURE_DIR_NAME, MODE_INSTALL, MODE_RUN, MODES, VIDEO_MEMORY_MB, VOLUME_FILE_NAME
from winvm.exceptions import MissingBootFloppyError, MissingMediumError, UserInputError
from winvm.models import OSFamily, OSProfile, Settings
from winvm.utils import log

Section = Tuple[str, List[Tuple[str, str]]]


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _sections(profile: OSProfile, mode: str, settings: Settings, vm_dir: Path) -> List[Section]:
    if mode == MODE_RUN:
        core = settings.core_run or profile.run_core
        turbo = settings.turbo_run
    else:
        core = settings.core_install or profile.install_core
        turbo = False

    sections: List[Section] = [
        ("sdl", [("autolock", "true")]),
        (
            "dosbox",
            [
                ("title", profile.title),
                ("memsize", str(profile.memory_mb)),
                ("captures", str(vm_dir / CAPTURE_DIR_NAME)),
            ],
        ),
        (
            "video",
            [
                ("vmemsize", str(VIDEO_MEMORY_MB)),
                ("vesa modelist width limit", "0"),
                ("vesa modelist height limit", "0"),
            ],
        ),
        (
            "dos",
            [
                ("ver", profile.dos_version),
                ("hard drive data rate limit", "0"),
                ("floppy drive data rate limit", "0"),
            ],
        ),
        ("cpu", [("cputype", profile.cpu_type), ("core", core), ("turbo", _bool(turbo))]),
        ("sblaster", [("sbtype", "sb16vibra")]),
        ("voodoo", [("voodoo_card", _bool(profile.voodoo))]),
        ("fdc, primary", [("int13fakev86io", "true")]),
        ("ide, primary", [("int13fakeio", "true"), ("int13fakev86io", "true")]),
        (
            "ide, secondary",
            [("int13fakeio", "true"), ("int13fakev86io", "true"), ("cd-rom insertion delay", "4000")],
        ),
        ("render", [("scaler", "none")]),
    ]
    if settings.net_backend:
        sections.append(
            (
                "ne2000",
                [("ne2000", "true"), ("nicirq", str(settings.net_irq)), ("backend", settings.net_backend)],
            )
        )
        if settings.net_backend == "pcap":
            sections.append(("ethernet, pcap", [("realnic", "list")]))
    return sections


def _hdd_mount(volume: Path) -> str:
    return f'IMGMOUNT 2 "{volume}" -t hdd -fs none -ide 1m'


def _iso_mount(medium: Path) -> str:
    return f'IMGMOUNT D "{medium}" -t iso -ide 2m'


InstallStrategy = Callable[[OSProfile, Settings, Path, Path, Optional[Path], Optional[bool]], List[str]]


def _install_cd_native(
    profile: OSProfile, settings: Settings, volume: Path, medium: Path, floppy: Optional[Path], bootable: Optional[bool]
) -> List[str]:
    return [
        "REM HDD (primary master)",
        _hdd_mount(volume),
        "REM Installer CD boots natively",
        _iso_mount(medium),
        "BOOT D:",
    ]


def _install_floppy_boot(
    profile: OSProfile, settings: Settings, volume: Path, medium: Path, floppy: Optional[Path], bootable: Optional[bool]
) -> List[str]:
    if floppy is None:
        raise MissingBootFloppyError(None)
    return [
        "REM HDD (primary master)",
        _hdd_mount(volume),
        "REM Boot floppy with the installer CD attached",
        _iso_mount(medium),
        f'IMGMOUNT A "{floppy}" -t floppy',
        "BOOT A:",
    ]


def _install_legacy(
    profile: OSProfile, settings: Settings, volume: Path, medium: Path, floppy: Optional[Path], bootable: Optional[bool]
) -> List[str]:
    if bootable:
        return [
            "REM HDD (primary master)",
            _hdd_mount(volume),
            "REM Bootable CD install (El Torito)",
            _iso_mount(medium),
            "IMGMOUNT A -bootcd D",
            "BOOT A:",
        ]

    setup_dir = profile.setup_dir or "SETUP"
    setup_cmd = profile.setup_command or "SETUP"
    installer = f"D:\\{setup_dir}\\SETUP.EXE"
    lines = [
        "REM Non-bootable CD install: copy files to C and run setup",
        f'IMGMOUNT C "{volume}" -t hdd -fs fat',
        _iso_mount(medium),
    ]
    if settings.auto_install_9x:
        lines += [
            f"IF NOT EXIST {installer} ECHO [!] {installer} not found on the medium; check its layout.",
            "C:",
            f"IF NOT EXIST C:\\{setup_dir} MD C:\\{setup_dir}",
            f"IF EXIST {installer} XCOPY D:\\{setup_dir} C:\\{setup_dir} /I /E >NUL",
            "C:",
            f"CD \\{setup_dir}",
            setup_cmd,
            "PROMPT $P$G",
        ]
    else:
        lines += [
            "ECHO.",
            f"ECHO === {profile.title} Install ===",
            "ECHO Copy the setup files to C: and start the installer:",
            f"ECHO   XCOPY D:\\{setup_dir} C:\\{setup_dir} /I /E",
            "ECHO   C:",
            f"ECHO   CD \\{setup_dir}",
            f"ECHO   {setup_cmd}",
            "ECHO.",
            "PROMPT $P$G",
        ]
    return lines


INSTALL_STRATEGIES: Dict[OSFamily, InstallStrategy] = {
    OSFamily.CD_NATIVE_BOOT: _install_cd_native,
    OSFamily.FLOPPY_BOOT: _install_floppy_boot,
    OSFamily.LEGACY_COPY_INSTALL: _install_legacy,
}


def _run_autoexec(volume: Path) -> List[str]:
    # Empty A:/B:/D: keep the drive letters the guest saw during setup.
    return [
        "IMGMOUNT 0 empty -fs none -t floppy",
        "IMGMOUNT 1 empty -fs none -t floppy -size 512,15,2,80",
        _hdd_mount(volume),
        "IMGMOUNT D empty -t iso -ide 2m",
        "BOOT C:",
    ]


def render_config(
    profile: OSProfile,
    mode: str,
    settings: Settings,
    vm_dir: Path,
    medium: Optional[Path] = None,
    floppy: Optional[Path] = None,
    bootable: Optional[bool] = None,
) -> str:
    if mode not in MODES:
        raise UserInputError(f"Unknown mode '{mode}'. Expected one of: {', '.join(MODES)}")
    volume = vm_dir / VOLUME_FILE_NAME

    if mode == MODE_INSTALL:
        if medium is None:
            raise MissingMediumError(None)
        autoexec = INSTALL_STRATEGIES[profile.family](profile, settings, volume, medium, floppy, bootable)
    else:
        autoexec = _run_autoexec(volume)

    blocks = []
    for name, entries in _sections(profile, mode, settings, vm_dir):
        body = "\n".join(f"{key}={value}" for key, value in entries)
        blocks.append(f"[{name}]\n{body}")
    blocks.append("[autoexec]\n" + "\n".join(["@echo off"] + autoexec))
    return "\n\n".join(blocks) + "\n"


def write_config(
    profile: OSProfile,
    mode: str,
    settings: Settings,
    vm_dir: Path,
    medium: Optional[Path] = None,
    floppy: Optional[Path] = None,
    bootable: Optional[bool] = None,
) -> Path:
    text = render_config(profile, mode, settings, vm_dir, medium=medium, floppy=floppy, bootable=bootable)
    conf = vm_dir / f"{profile.key}-{mode}.conf"
    conf.write_text(text)
    log("INFO", f"Wrote config: {conf}")
    return conf
