from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from vminspect.collectors.cmdline import CommandRecord
from vminspect.collectors.smaps import MemoryRegion, MemorySnapshot
from vminspect.collectors.status import StatusRecord

if TYPE_CHECKING:
    from vminspect.inspector import InspectionSnapshot

HEADER_WIDTH = 30


# ---------------- Utilities ----------------

def draw_line(dot: str, title: str, width: int = HEADER_WIDTH) -> Optional[str]:
    """Center `title` in a line of `dot`s. None if the title does not fit."""
    if len(title) > width:
        return None
    n = width - len(title)
    return f"{dot * (n // 2)}{title}{dot * (n - n // 2)}"


def _header(title: str, width: int) -> str:
    # fall back to the bare title when the configured width is too small
    return draw_line("-", title, width) or title


def percentage(value: int, base: int) -> int:
    """value / base as an integer percent, capped at 100; 0 when base is 0."""
    if value > base:
        return 100
    if base == 0:
        return 0
    return int(value / base * 100)


# ---------------- Sections ----------------

def render_status(status: StatusRecord, width: int = HEADER_WIDTH) -> str:
    lines = [
        _header("Process Status", width),
        f"Pid:            {status.pid}",
        f"VmRSS:          {status.vm_rss} KB",
        f" -> RssAnon:    {status.rss_anon} KB   ({percentage(status.rss_anon, status.vm_rss)}%)",
        f" -> RssFile:    {status.rss_file} KB",
        f" -> RssShmem:   {status.rss_shmem} KB",
        f"HugetlbPages:   {status.hugetlb_pages} KB",
        f"VmPeak:         {status.vm_peak} KB",
        f"VmSize:         {status.vm_size} KB",
        f"VmHWM:          {status.vm_hwm} KB",
        f"VmData:         {status.vm_data} KB",
        f"VmStk:          {status.vm_stk} KB",
        f"VmExe:          {status.vm_exe} KB",
        f"VmLib:          {status.vm_lib} KB",
        f"VmPTE:          {status.vm_pte} KB",
        f"Threads:        {status.threads}",
    ]
    return "\n".join(lines)


def render_cmdline(cmd: CommandRecord, width: int = HEADER_WIDTH) -> str:
    return f"{_header('Command Line', width)}\n{cmd.name} {' '.join(cmd.args)}"


def render_region(vma: MemoryRegion) -> str:
    return f"{vma.start:X} -> {vma.end:X} RSS: {vma.rss:>10} KB {vma.notion or ''}"


def render_smaps(
    smaps: MemorySnapshot,
    width: int = HEADER_WIDTH,
    top: int = 0,
    show_libs: bool = False,
) -> str:
    """
    Render the tracked VMAs (largest first).
    top > 0 limits the rows printed; the count line always shows the total.
    """
    lines = [
        _header("Process VMAs", width),
        f"RSS (Shared Libs): {smaps.libs_rss} KB",
    ]
    if show_libs:
        # one entry per mapping, a library shows up once per segment
        for lib in dict.fromkeys(smaps.libs):
            lines.append(f"  {lib}")

    lines.append(f"{len(smaps.vmas)} VMAs with RSS usage > 0:")
    vmas = smaps.vmas[:top] if top > 0 else smaps.vmas
    lines.extend(render_region(v) for v in vmas)
    if len(vmas) < len(smaps.vmas):
        lines.append(f"... {len(smaps.vmas) - len(vmas)} more")
    return "\n".join(lines)


def render_snapshot(
    snapshot: InspectionSnapshot,
    width: int = HEADER_WIDTH,
    top: int = 0,
    show_libs: bool = False,
) -> str:
    """Sections in fixed order: status, command line, memory map."""
    parts: List[str] = []
    if snapshot.status is not None:
        parts.append(render_status(snapshot.status, width))
    if snapshot.cmdline is not None:
        parts.append(render_cmdline(snapshot.cmdline, width))
    if snapshot.smaps is not None:
        parts.append(render_smaps(snapshot.smaps, width, top=top, show_libs=show_libs))
    return "\n".join(parts)


# ---------------- JSON ----------------

def _region_dict(vma: MemoryRegion) -> Dict[str, Any]:
    d = asdict(vma)
    d["size"] = vma.size
    return d


def snapshot_to_dict(snapshot: InspectionSnapshot) -> Dict[str, Any]:
    smaps = snapshot.smaps
    return {
        "pid": snapshot.pid,
        "status": asdict(snapshot.status) if snapshot.status is not None else None,
        "cmdline": (
            {"name": snapshot.cmdline.name, "args": list(snapshot.cmdline.args)}
            if snapshot.cmdline is not None
            else None
        ),
        "smaps": (
            {
                "libs_rss": smaps.libs_rss,
                "libs": list(smaps.libs),
                "vmas": [_region_dict(v) for v in smaps.vmas],
            }
            if smaps is not None
            else None
        ),
        "errors": dict(snapshot.errors),
    }


def render_json(snapshot: InspectionSnapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot), indent=2, ensure_ascii=False)
