"""Global constants and path layout for winvm."""

from __future__ import annotations

import re
from pathlib import Path

DEFAULT_BASE_DIR = Path("~/dosboxx")
DEFAULT_EMULATOR = "dosbox-x"
MEDIA_CONFIG_NAME = "media.yaml"

VMS_DIR_NAME = "vms"
ISOS_DIR_NAME = "isos"
BOOT_DIR_NAME = "boot"
BIN_DIR_NAME = "bin"
CAPTURE_DIR_NAME = "capture"

VOLUME_FILE_NAME = "hdd.img"
WRITE_PROBE_NAME = ".write_test"
NT_BOOT_FLOPPY_NAME = "nt4-boot.img"
TRANSCRIPT_TOOL = "dosboxx"

MODE_INSTALL = "install"
MODE_RUN = "run"
MODES = (MODE_INSTALL, MODE_RUN)

TRUTHY = {"1", "true", "yes", "on"}

# Symbolic IMGMAKE-style size templates, in MB.
SIZE_TEMPLATES = {
    "hd_2gig": 2048,
    "hd_4gig": 4096,
    "hd_8gig": 8192,
    "small": 2048,
    "medium": 4096,
    "large": 8192,
}
FALLBACK_SIZE_MB = 4096
FAT16_MAX_MB = 2048
SIZE_LITERAL_RE = re.compile(r"^\d+$")

INSTALL_METHODS = {"auto", "copy", "bootcd"}
NET_BACKENDS = {"slirp", "pcap"}

NO_BOOT_RECORD_SIGNATURE = "El Torito CD-ROM boot record not found"
TRANSCRIPT_SEPARATOR = "=" * 20
EXIT_MARKER_RE = re.compile(r"^=== exit (-?\d+) ===$")

VIDEO_MEMORY_MB = 8
