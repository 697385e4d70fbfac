"""Custom exceptions for winvm."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional


class ManagerError(RuntimeError):
    """Raised on unrecoverable configuration or runtime errors."""


class UserInputError(ManagerError):
    """Bad operator input: unknown key, malformed argument or setting."""


class PreconditionError(ManagerError):
    """Something the operator has to put in place before retrying."""


class ExternalToolFailure(ManagerError):
    """The emulator (or a remote source) did not produce what was expected."""


class UnknownOSError(UserInputError):
    def __init__(self, os_key: str, supported: Iterable[str]) -> None:
        self.os_key = os_key
        self.supported = sorted(supported)
        super().__init__(f"Unknown OS key '{os_key}'. Supported: {', '.join(self.supported)}")


class InvalidSizeError(UserInputError):
    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(
            f"Invalid volume size '{raw}'. Use a positive MB count or one of hd_2gig, hd_4gig, hd_8gig"
        )


class DirectoryNotWritableError(PreconditionError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Directory not writable: {path} (check permissions)")


class MissingMediumError(PreconditionError):
    def __init__(self, path: Optional[Path], url_variable: Optional[str] = None) -> None:
        self.path = path
        self.url_variable = url_variable
        if path is None:
            message = "Install mode needs an installation medium"
        else:
            message = f"Missing installation medium: {path}. Place your legally-obtained ISO there"
            if url_variable:
                message += f" (or set ${url_variable})"
        super().__init__(message)


class MissingBootFloppyError(PreconditionError):
    def __init__(self, path: Optional[Path]) -> None:
        self.path = path
        if path is None:
            message = "Install mode needs a boot floppy image for this guest"
        else:
            message = f"Missing boot floppy: provide an image at {path}"
        super().__init__(message)


class NotProvisionedError(PreconditionError):
    def __init__(self, os_key: str, conf_path: Path) -> None:
        self.os_key = os_key
        self.conf_path = conf_path
        super().__init__(
            f"VM '{os_key}' is not provisioned: {conf_path} does not exist. "
            f"Run 'winvm new {os_key}' or 'winvm install {os_key}' first"
        )


class EmulatorNotFoundError(PreconditionError):
    def __init__(self, binary: str) -> None:
        self.binary = binary
        super().__init__(f"Emulator binary '{binary}' not found on PATH. Install DOSBox-X, then re-run")


class VolumeCreationFailedError(ExternalToolFailure):
    def __init__(self, image: Path, transcript: Path) -> None:
        self.image = image
        self.transcript = transcript
        super().__init__(f"Failed to create {image}. Check log: {transcript}")


class DownloadError(ExternalToolFailure):
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to download {url}: {reason}")
