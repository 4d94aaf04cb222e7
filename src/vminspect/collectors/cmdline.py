from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from vminspect.collectors.procfs import DEFAULT_PROC_ROOT, read_proc_text

# Arguments are assumed to be introduced by "-"; anything else stays glued
# to the previous segment.
FLAG_SEP = " -"


@dataclass(frozen=True)
class CommandRecord:
    name: str
    args: Tuple[str, ...] = ()


def _format_arg(segment: str) -> str:
    flag, sep, value = segment.partition(" ")
    if not sep:
        return "-" + segment
    return f"-{flag} '{value.rstrip()}'"


def parse_cmdline(text: str) -> CommandRecord:
    """
    Rebuild program name and flags from NUL separated /proc/<pid>/cmdline.

    "prog\\0-v\\0-file x.txt\\0" -> name "prog", args ("-v", "-file 'x.txt'")
    """
    parts = text.replace("\0", " ").split(FLAG_SEP)
    return CommandRecord(
        name=parts[0],
        args=tuple(_format_arg(p) for p in parts[1:]),
    )


def read_cmdline(pid: int, proc_root: Union[str, Path] = DEFAULT_PROC_ROOT) -> CommandRecord:
    return parse_cmdline(read_proc_text(pid, "cmdline", proc_root))
