"""Utility functions for winvm."""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path
from typing import Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from winvm.constants import TRUTHY
from winvm.exceptions import DirectoryNotWritableError, DownloadError, UserInputError

_LOG_VERBOSE = False


def set_verbose(enabled: bool) -> None:
    global _LOG_VERBOSE
    _LOG_VERBOSE = enabled


def log(level: str, message: str) -> None:
    """Lightweight structured logging with a colour per level."""
    if level == "DEBUG" and not _LOG_VERBOSE:
        return
    colours = {
        "INFO": "\033[0;34m",
        "WARN": "\033[1;33m",
        "ERROR": "\033[0;31m",
        "SUCCESS": "\033[0;32m",
        "DEBUG": "\033[0;90m",
    }
    colour = colours.get(level, "")
    reset = "\033[0m" if colour else ""
    print(f"{colour}[{level}]{reset} {message}", flush=True)


def get_env(name: str, default: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    source = os.environ if environ is None else environ
    return source.get(name, default)


def get_env_bool(name: str, default: bool = False, environ: Optional[Mapping[str, str]] = None) -> bool:
    raw = get_env(name, environ=environ)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY


def parse_int_env(
    name: str,
    default: str,
    min_val: int = 1,
    max_val: Optional[int] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    raw = get_env(name, default, environ=environ)
    assert raw is not None
    try:
        value = int(raw)
    except ValueError:
        raise UserInputError(f"{name} must be an integer (got '{raw}')")
    if value < min_val:
        raise UserInputError(f"{name} must be >= {min_val} (got {value})")
    if max_val is not None and value > max_val:
        raise UserInputError(f"{name} must be <= {max_val} (got {value})")
    return value


def media_url_variable(medium_name: str) -> str:
    """Name of the URL override for a canonical medium, e.g. Win98SE.iso -> WIN98SE_ISO_URL."""
    return medium_name.upper().replace(".", "_") + "_URL"


def ensure_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        raise DirectoryNotWritableError(path)


_MIB = 1024 * 1024
_CHUNK_BYTES = 256 * 1024


def _report_progress(received: int, total: Optional[int], started: float) -> None:
    rate = received / max(time.monotonic() - started, 1e-6) / _MIB
    if total:
        width = 30
        filled = width * received // total
        line = f"[{'#' * filled}{'-' * (width - filled)}] {received / _MIB:.1f}/{total / _MIB:.1f} MiB"
    else:
        line = f"{received / _MIB:.1f} MiB"
    print(f"\r  {line} ({rate:.1f} MiB/s)", end="", flush=True)


def download_file(url: str, destination: Path, label: str = "Downloading") -> None:
    """Fetch ``url`` into ``destination``.

    Data lands in a sibling temp file that only replaces ``destination`` once
    the transfer finished, so an interrupted download never leaves a partial
    medium under the canonical name.
    """
    log("INFO", f"{label}: {url}")
    request = Request(url, headers={"User-Agent": "winvm/1.0"})
    started = time.monotonic()
    received = 0
    try:
        with urlopen(request, timeout=60) as response, tempfile.NamedTemporaryFile(
            dir=destination.parent, prefix=f".{destination.name}.", delete=False
        ) as tmp:
            partial = Path(tmp.name)
            length = response.headers.get("Content-Length")
            total = int(length) if length else None
            try:
                for chunk in iter(lambda: response.read(_CHUNK_BYTES), b""):
                    tmp.write(chunk)
                    received += len(chunk)
                    _report_progress(received, total, started)
            except BaseException:
                tmp.close()
                partial.unlink(missing_ok=True)
                raise
    except HTTPError as exc:
        raise DownloadError(url, f"HTTP {exc.code} {exc.reason}")
    except URLError as exc:
        raise DownloadError(url, str(exc.reason))
    print(flush=True)
    partial.replace(destination)
    log("SUCCESS", f"Downloaded {received / _MIB:.1f} MiB in {time.monotonic() - started:.1f}s")
