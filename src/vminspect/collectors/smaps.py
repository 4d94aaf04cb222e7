from __future__ import annotations

import logging
import string
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from vminspect.collectors.procfs import DEFAULT_PROC_ROOT, read_proc_text
from vminspect.collectors.tokens import (
    FIELD_DELIMS,
    KEY_VALUE_DELIMS,
    field_value,
    parse_int,
    split_lines,
    tokenize,
)
from vminspect.errors import ParseError

SHARED_LIB_PREFIX = "/usr/lib64"

# Header lines look like:
#   7f2c4a1e5000-7f2c4a1e7000 rw-p 00000000 00:00 0          [heap]
# Addresses are zero padded, so a long line starting with 12 hex digits
# begins a new region.
_HEADER_MIN_LEN = 45
_HEADER_HEX_PREFIX = 12
_HEX = frozenset(string.hexdigits)

# smaps detail key -> MemoryRegion field
_SIZE_FIELDS: Dict[str, str] = {
    "Rss": "rss",
    "Pss": "pss",
    "Shared_Clean": "shared_clean",
    "Shared_Dirty": "shared_dirty",
    "Private_Clean": "private_clean",
    "Private_Dirty": "private_dirty",
    "Locked": "locked",
}

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemoryRegion:
    """
    One virtual memory area from /proc/<pid>/smaps.

    Sizes are in KB. rss == shared_clean + shared_dirty + private_clean
    + private_dirty in kernel output, not checked here.
    """

    start: int
    end: int
    perm: str
    # 0 or start / PAGE_SIZE for anonymous mappings
    offset: int
    # 00:00 for anonymous mappings
    device: str
    inode: int
    # file path or segment label ([heap], [stack], ...)
    notion: Optional[str] = None

    rss: int = 0
    # private + shared / number of sharers
    pss: int = 0
    shared_clean: int = 0
    shared_dirty: int = 0
    private_clean: int = 0
    private_dirty: int = 0
    # cannot be swapped out
    locked: int = 0

    @property
    def size(self) -> int:
        """Mapped range in bytes."""
        return self.end - self.start


@dataclass(frozen=True)
class MemorySnapshot:
    """Regions worth looking at, plus the shared libraries folded into one total."""

    vmas: Tuple[MemoryRegion, ...] = ()
    libs_rss: int = 0
    libs: Tuple[str, ...] = ()


def is_region_header(line: str) -> bool:
    return len(line) > _HEADER_MIN_LEN and all(c in _HEX for c in line[:_HEADER_HEX_PREFIX])


def is_shared_lib(region: MemoryRegion, prefix: str = SHARED_LIB_PREFIX) -> bool:
    return region.notion is not None and region.notion.startswith(prefix)


def region_sort_key(region: MemoryRegion) -> Tuple[int, bool]:
    """Bigger rss first; on equal rss, labeled regions before anonymous ones."""
    return (-region.rss, region.notion is None)


def parse_region(lines: Sequence[str]) -> MemoryRegion:
    """Build a MemoryRegion from a header line and its detail lines."""
    if not lines:
        raise ParseError("empty region block")

    header = lines[0]
    tokens = tokenize(header, FIELD_DELIMS)
    if len(tokens) < 5:
        raise ParseError(f"malformed region header {header!r}")

    bounds = tokens[0].split("-")
    if len(bounds) != 2:
        raise ParseError(f"malformed address range {tokens[0]!r}")

    sizes: Dict[str, int] = {}
    for line in lines[1:]:
        detail = tokenize(line, KEY_VALUE_DELIMS)
        if not detail:
            continue
        name = _SIZE_FIELDS.get(detail[0])
        if name is None:
            continue
        sizes[name] = parse_int(field_value(detail, line))

    return MemoryRegion(
        start=parse_int(bounds[0], radix=16),
        end=parse_int(bounds[1], radix=16),
        perm=tokens[1],
        offset=parse_int(tokens[2], radix=16),
        device=tokens[3],
        inode=parse_int(tokens[4]),
        notion=tokens[5] if len(tokens) > 5 else None,
        **sizes,
    )


@dataclass
class SmapsBuilder:
    """Collects regions while parsing, frozen into a MemorySnapshot by build()."""

    shared_lib_prefix: str = SHARED_LIB_PREFIX
    vmas: List[MemoryRegion] = field(default_factory=list)
    libs_rss: int = 0
    libs: List[str] = field(default_factory=list)

    def add(self, region: MemoryRegion) -> None:
        """Route a region to the tracked list or the shared-lib total; rss == 0 is dropped."""
        if region.rss == 0:
            log.debug("drop %x-%x: no resident pages", region.start, region.end)
            return
        if is_shared_lib(region, self.shared_lib_prefix):
            self.libs_rss += region.rss
            self.libs.append(region.notion)  # type: ignore[arg-type]
        else:
            self.vmas.append(region)

    def build(self) -> MemorySnapshot:
        return MemorySnapshot(
            vmas=tuple(sorted(self.vmas, key=region_sort_key)),
            libs_rss=self.libs_rss,
            libs=tuple(self.libs),
        )


def parse_smaps(text: str, shared_lib_prefix: str = SHARED_LIB_PREFIX) -> MemorySnapshot:
    """
    Parse the text of /proc/<pid>/smaps.
    A ParseError in any block aborts the whole parse.
    """
    builder = SmapsBuilder(shared_lib_prefix=shared_lib_prefix)
    block: List[str] = []

    for line in split_lines(text):
        if is_region_header(line) and block:
            builder.add(parse_region(block))
            block = []
        block.append(line)

    if block:
        builder.add(parse_region(block))

    snap = builder.build()
    log.debug("smaps: %d tracked vmas, %d shared lib vmas (%d KB)", len(snap.vmas), len(snap.libs), snap.libs_rss)
    return snap


def read_smaps(
    pid: int,
    proc_root: Union[str, Path] = DEFAULT_PROC_ROOT,
    shared_lib_prefix: str = SHARED_LIB_PREFIX,
) -> MemorySnapshot:
    """Load /proc/<pid>/smaps into a MemorySnapshot."""
    return parse_smaps(read_proc_text(pid, "smaps", proc_root), shared_lib_prefix)
