"""Configuration loading and environment variable parsing for winvm."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from winvm.constants import (
    DEFAULT_BASE_DIR,
    DEFAULT_EMULATOR,
    INSTALL_METHODS,
    MEDIA_CONFIG_NAME,
    NET_BACKENDS,
)
from winvm.exceptions import UserInputError
from winvm.models import Settings
from winvm.profiles import PROFILES
from winvm.utils import get_env, get_env_bool, log, media_url_variable, parse_int_env


def load_media_config(config_path: Path) -> Dict[str, str]:
    """Read ``media: {<CanonicalName>.iso: <url>}`` from a YAML file, if present."""
    if not config_path.exists():
        return {}
    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as exc:
        raise UserInputError(f"Media config {config_path} contains invalid YAML: {exc}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise UserInputError(f"Media config {config_path} must be a YAML mapping")
    media = data.get("media") or {}
    if not isinstance(media, dict):
        raise UserInputError(f"Media config {config_path}: 'media' must map ISO names to URLs")
    known = {profile.medium_name for profile in PROFILES.values()}
    urls: Dict[str, str] = {}
    for name, url in media.items():
        if name not in known:
            log("WARN", f"Media config {config_path}: ignoring unknown medium '{name}'")
            continue
        if url:
            urls[str(name)] = str(url).strip()
    return urls


def _parse_core(name: str, environ: Optional[Mapping[str, str]]) -> Optional[str]:
    raw = get_env(name, environ=environ)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def parse_env(environ: Optional[Mapping[str, str]] = None) -> Settings:
    base_raw = (get_env("DOSBOXX_HOME", environ=environ) or "").strip()
    base_dir = Path(base_raw).expanduser() if base_raw else DEFAULT_BASE_DIR.expanduser()

    verbose = get_env_bool("DOSBOXX_DEBUG", False, environ=environ)
    emulator_binary = (get_env("DOSBOXX_BIN", environ=environ) or "").strip() or DEFAULT_EMULATOR
    auto_install_9x = get_env_bool("AUTO_INSTALL_9X", True, environ=environ)

    install_methods: Dict[str, str] = {}
    for os_key in ("win95", "win98"):
        name = f"{os_key.upper()}_METHOD"
        method = (get_env(name, "auto", environ=environ) or "auto").strip().lower() or "auto"
        if method not in INSTALL_METHODS:
            supported = ", ".join(sorted(INSTALL_METHODS))
            raise UserInputError(f"Unsupported {name} '{method}'. Supported: {supported}")
        install_methods[os_key] = method

    net_backend = (get_env("NET_BACKEND", environ=environ) or "").strip().lower()
    if net_backend and net_backend not in NET_BACKENDS:
        supported = ", ".join(sorted(NET_BACKENDS))
        raise UserInputError(f"Unsupported NET_BACKEND '{net_backend}'. Supported: {supported} (or empty)")
    net_irq = parse_int_env("NET_IRQ", "10", min_val=3, max_val=15, environ=environ)

    media_config_raw = (get_env("DOSBOXX_MEDIA_CONFIG", environ=environ) or "").strip()
    media_config = Path(media_config_raw).expanduser() if media_config_raw else base_dir / MEDIA_CONFIG_NAME
    media_urls = load_media_config(media_config)
    for profile in PROFILES.values():
        url = (get_env(media_url_variable(profile.medium_name), environ=environ) or "").strip()
        if url:
            media_urls[profile.medium_name] = url

    return Settings(
        base_dir=base_dir,
        verbose=verbose,
        emulator_binary=emulator_binary,
        auto_install_9x=auto_install_9x,
        install_methods=install_methods,
        core_install=_parse_core("DOSBOXX_CORE_INSTALL", environ),
        core_run=_parse_core("DOSBOXX_CORE_RUN", environ),
        turbo_run=get_env_bool("DOSBOXX_TURBO_RUN", False, environ=environ),
        net_backend=net_backend,
        net_irq=net_irq,
        media_urls=media_urls,
    )
