from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from vminspect.collectors.cmdline import CommandRecord, read_cmdline
from vminspect.collectors.smaps import MemorySnapshot, read_smaps
from vminspect.collectors.status import StatusRecord, read_status
from vminspect.config import DEFAULT_CONFIG, InspectConfig
from vminspect.errors import InspectError
from vminspect.render import render_snapshot

log = logging.getLogger(__name__)

SOURCES = ("status", "cmdline", "smaps")


@dataclass(frozen=True)
class InspectionSnapshot:
    """
    Everything collected for one pid in one run.
    A source that was not requested, or failed, is None; failures are kept in `errors`.
    """

    pid: int
    status: Optional[StatusRecord] = None
    cmdline: Optional[CommandRecord] = None
    smaps: Optional[MemorySnapshot] = None
    errors: Dict[str, str] = field(default_factory=dict)


def _try(source: str, pid: int, load: Callable[[], object], errors: Dict[str, str]):
    try:
        return load()
    except InspectError as e:
        log.debug("pid %d: %s unavailable: %s", pid, source, e)
        errors[source] = str(e)
        return None


def inspect_process(
    pid: int,
    status: bool = False,
    cmdline: bool = False,
    smaps: bool = False,
    config: Optional[InspectConfig] = None,
) -> InspectionSnapshot:
    """
    Read the selected procfs sources of `pid`.

    Each source is independent: one failing source does not stop the others.
    The three files are read one after the other, so they may describe
    slightly different instants of a busy process.
    """
    config = config or DEFAULT_CONFIG
    errors: Dict[str, str] = {}
    root = config.proc_root

    st = _try("status", pid, lambda: read_status(pid, root), errors) if status else None
    cmd = _try("cmdline", pid, lambda: read_cmdline(pid, root), errors) if cmdline else None
    sm = (
        _try("smaps", pid, lambda: read_smaps(pid, root, config.shared_lib_prefix), errors)
        if smaps
        else None
    )

    return InspectionSnapshot(pid=pid, status=st, cmdline=cmd, smaps=sm, errors=errors)


class MemInspector:
    """Memory consumption of a VM (or any process) given its pid."""

    def __init__(
        self,
        pid: int,
        cmd: bool = False,
        status: bool = False,
        smaps: bool = False,
        config: Optional[InspectConfig] = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.snapshot = inspect_process(pid, status=status, cmdline=cmd, smaps=smaps, config=self.config)

    @property
    def errors(self) -> Dict[str, str]:
        return self.snapshot.errors

    def inspect(self, top: int = 0, show_libs: bool = False) -> str:
        return render_snapshot(self.snapshot, self.config.header_width, top=top, show_libs=show_libs)
