"""Provisioning workflow: new, install, start and attach-medium.

Per VM the observable states are::

    absent -> volume created -> install config written
           -> (guest installs itself) -> run config written / launchable

Every command is safe to re-run: an existing ``hdd.img`` is never recreated
and configs plus launchers are simply regenerated. Nothing locks the VM
directory; two invocations against the same VM at once are not supported.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional, Union

from winvm.constants import CAPTURE_DIR_NAME, MODE_INSTALL, MODE_RUN
from winvm.emulator import Emulator
from winvm.exceptions import MissingBootFloppyError, MissingMediumError, NotProvisionedError, PreconditionError
from winvm.launchers import write_launchers
from winvm.models import OSFamily, OSProfile, Settings, Volume
from winvm.probe import CachingMediumProbe, MediumProbe, TranscriptMediumProbe
from winvm.profiles import PROFILES, resolve
from winvm.synthesizer import write_config
from winvm.utils import download_file, ensure_directory, log, media_url_variable
from winvm.volume import VolumeManager, check_writable

PROBE_DIR_NAME = ".probe"


class Orchestrator:
    def __init__(
        self,
        settings: Settings,
        emulator: Optional[Emulator] = None,
        probe: Optional[MediumProbe] = None,
        volumes: Optional[VolumeManager] = None,
    ) -> None:
        self.settings = settings
        self.emulator = emulator or Emulator(settings)
        self.volumes = volumes or VolumeManager(self.emulator)
        if probe is None:
            probe = TranscriptMediumProbe(self.emulator, settings.base_dir / PROBE_DIR_NAME)
        self.probe = CachingMediumProbe(probe)

    def ensure_directories(self) -> None:
        for path in (self.settings.vms_dir, self.settings.isos_dir, self.settings.boot_dir, self.settings.bin_dir):
            ensure_directory(path)

    def create_vm(self, profile: OSProfile, size: Optional[Union[int, str]] = None) -> Volume:
        vm_dir = self.settings.vm_dir(profile.key)
        check_writable(vm_dir)
        ensure_directory(vm_dir / CAPTURE_DIR_NAME)
        if size is None or (isinstance(size, str) and not size.strip()):
            size = profile.default_disk_mb
        return self.volumes.ensure_volume(vm_dir, size)

    def resolve_medium(self, profile: OSProfile) -> Path:
        path = self.settings.isos_dir / profile.medium_name
        if path.is_file():
            return path
        url = self.settings.media_urls.get(profile.medium_name)
        if url:
            ensure_directory(path.parent)
            download_file(url, path, label=f"Downloading {profile.medium_name}")
            return path
        raise MissingMediumError(path, media_url_variable(profile.medium_name))

    def resolve_floppy(self, profile: OSProfile) -> Optional[Path]:
        if profile.family is not OSFamily.FLOPPY_BOOT:
            return None
        floppy = self.settings.nt_boot_floppy
        if not floppy.is_file():
            raise MissingBootFloppyError(floppy)
        return floppy

    def bootability(self, profile: OSProfile, medium: Path) -> Optional[bool]:
        """Decide the boot path for legacy guests; other families ignore it."""
        if profile.family is not OSFamily.LEGACY_COPY_INSTALL:
            return None
        method = self.settings.install_method(profile.key)
        if method == "copy":
            log("INFO", f"{profile.key.upper()}_METHOD=copy; skipping boot record probe")
            return False
        if method == "bootcd":
            log("INFO", f"{profile.key.upper()}_METHOD=bootcd; skipping boot record probe")
            return True
        log("INFO", f"Probing {medium} for a boot record...")
        bootable = self.probe.is_bootable(medium)
        if bootable:
            log("INFO", f"{medium.name} is bootable; installing from the CD directly")
        else:
            log("INFO", f"{medium.name} is not bootable; setup files will be copied to C:")
        return bootable

    def new(self, os_key: str, size: Optional[Union[int, str]] = None) -> Path:
        profile = resolve(os_key)
        self.ensure_directories()
        self.create_vm(profile, size)
        vm_dir = self.settings.vm_dir(os_key)
        run_conf = write_config(profile, MODE_RUN, self.settings, vm_dir)
        write_launchers(self.settings, os_key)
        return run_conf

    def install(self, os_key: str, launch: bool = True) -> Path:
        profile = resolve(os_key)
        self.ensure_directories()
        self.emulator.ensure_present()
        self.create_vm(profile)
        vm_dir = self.settings.vm_dir(os_key)

        medium = self.resolve_medium(profile)
        floppy = self.resolve_floppy(profile)
        bootable = self.bootability(profile, medium)

        install_conf = write_config(
            profile, MODE_INSTALL, self.settings, vm_dir, medium=medium, floppy=floppy, bootable=bootable
        )
        write_config(profile, MODE_RUN, self.settings, vm_dir)
        write_launchers(self.settings, os_key)

        if launch:
            log("INFO", "Launching installer now...")
            self.emulator.handoff(install_conf)
        return install_conf

    def start(self, os_key: str) -> None:
        resolve(os_key)
        run_conf = self.settings.conf_path(os_key, MODE_RUN)
        if not run_conf.is_file():
            raise NotProvisionedError(os_key, run_conf)
        self.emulator.handoff(run_conf)

    def attach_medium(self, os_key: str, source: Path) -> Path:
        """Copy a local ISO into the media directory under the guest's canonical name."""
        profile = resolve(os_key)
        source = Path(source).expanduser()
        if not source.is_file():
            raise PreconditionError(f"Medium not found: {source}")
        ensure_directory(self.settings.isos_dir)
        destination = self.settings.isos_dir / profile.medium_name
        if source.resolve() == destination.resolve():
            log("INFO", f"{source} is already in place")
            return destination
        try:
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise PreconditionError(f"Copy of {source} to {destination} failed: {exc}")
        log("SUCCESS", f"Copied {source} to {destination}")
        return destination

    def setup(self) -> bool:
        self.ensure_directories()
        found = self.emulator.locate()
        if found:
            log("SUCCESS", f"{self.settings.emulator_binary} found at {found}")
        else:
            log("WARN", f"{self.settings.emulator_binary} not found on PATH; install DOSBox-X with your package manager")
        log("INFO", f"Put your Windows ISOs in: {self.settings.isos_dir}")
        log("INFO", "  " + ", ".join(profile.medium_name for profile in PROFILES.values()))
        log("INFO", f"For NT4 installs, supply a boot floppy image at {self.settings.nt_boot_floppy}")
        return bool(found)
