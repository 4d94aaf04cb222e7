from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from vminspect.errors import IoError

DEFAULT_PROC_ROOT = "/proc"

log = logging.getLogger(__name__)


def proc_file(pid: int, name: str, proc_root: Union[str, Path] = DEFAULT_PROC_ROOT) -> Path:
    return Path(proc_root) / str(pid) / name


def read_proc_text(pid: int, name: str, proc_root: Union[str, Path] = DEFAULT_PROC_ROOT) -> str:
    """
    Read /proc/<pid>/<name> in one go.
    Any OSError (missing pid, permission denied, vanished process) becomes IoError.
    """
    path = proc_file(pid, name, proc_root)
    try:
        with path.open("r", encoding="utf-8", errors="replace", newline="") as f:
            text = f.read()
    except OSError as e:
        raise IoError(f"{path}: {e.strerror or e}") from e

    log.debug("read %d bytes from %s", len(text), path)
    return text
