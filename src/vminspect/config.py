from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

import yaml

from vminspect import paths

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InspectConfig:
    # Where per-process files are read from
    proc_root: str = "/proc"

    # smaps regions under this path are summed up instead of listed
    shared_lib_prefix: str = "/usr/lib64"

    # Width of the dotted section titles
    header_width: int = 30

    log_level: str = "WARNING"


DEFAULT_CONFIG = InspectConfig()


def _to_dict(cfg: InspectConfig) -> Dict[str, Any]:
    return {
        "proc_root": cfg.proc_root,
        "smaps": {
            "shared_lib_prefix": cfg.shared_lib_prefix,
        },
        "render": {
            "header_width": cfg.header_width,
        },
        "log_level": cfg.log_level,
    }


def ensure_config_exists() -> None:
    """Write config.yaml with the defaults if it is missing."""
    paths.ensure_dirs()
    cfg_path = paths.config_file()
    if cfg_path.exists():
        return

    cfg_path.write_text(
        yaml.safe_dump(_to_dict(DEFAULT_CONFIG), sort_keys=False),
        encoding="utf-8",
    )


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    sec = raw.get(key) or {}
    return sec if isinstance(sec, dict) else {}


def load_config() -> InspectConfig:
    """Load config.yaml, falling back to defaults for missing or bad values."""
    try:
        ensure_config_exists()
        raw = yaml.safe_load(paths.config_file().read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning("config %s unusable, using defaults: %s", paths.config_file(), e)
        return DEFAULT_CONFIG
    if not isinstance(raw, dict):
        raw = {}

    smaps = _section(raw, "smaps")
    render = _section(raw, "render")

    try:
        width = int(render.get("header_width", DEFAULT_CONFIG.header_width))
    except (TypeError, ValueError):
        width = DEFAULT_CONFIG.header_width

    return InspectConfig(
        proc_root=str(raw.get("proc_root") or DEFAULT_CONFIG.proc_root),
        shared_lib_prefix=str(smaps.get("shared_lib_prefix") or DEFAULT_CONFIG.shared_lib_prefix),
        header_width=width if width > 0 else DEFAULT_CONFIG.header_width,
        log_level=str(raw.get("log_level") or DEFAULT_CONFIG.log_level).upper(),
    )
