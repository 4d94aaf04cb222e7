from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple, Union

from vminspect.collectors.procfs import DEFAULT_PROC_ROOT, read_proc_text
from vminspect.collectors.tokens import KEY_VALUE_DELIMS, field_value, parse_int, split_lines, tokenize

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusRecord:
    """
    Memory counters taken from /proc/<pid>/status.
    Sizes are in KB, keys missing from the kernel text stay 0.
    """

    pid: int = 0
    # peak virtual memory size (may be < vm_size)
    vm_peak: int = 0
    vm_size: int = 0
    # peak resident set size (may be < vm_rss)
    vm_hwm: int = 0
    # rss_anon + rss_file + rss_shmem
    vm_rss: int = 0
    rss_anon: int = 0
    rss_file: int = 0
    rss_shmem: int = 0
    vm_data: int = 0
    vm_stk: int = 0
    vm_exe: int = 0
    vm_lib: int = 0
    vm_pte: int = 0
    hugetlb_pages: int = 0
    threads: int = 0


# kernel key -> (field, bit width)
STATUS_FIELDS: Dict[str, Tuple[str, int]] = {
    "Pid": ("pid", 32),
    "VmPeak": ("vm_peak", 64),
    "VmSize": ("vm_size", 64),
    "VmHWM": ("vm_hwm", 64),
    "VmRSS": ("vm_rss", 64),
    "RssAnon": ("rss_anon", 64),
    "RssFile": ("rss_file", 64),
    "RssShmem": ("rss_shmem", 64),
    "VmData": ("vm_data", 64),
    "VmStk": ("vm_stk", 32),
    "VmExe": ("vm_exe", 32),
    "VmLib": ("vm_lib", 32),
    "VmPTE": ("vm_pte", 32),
    "HugetlbPages": ("hugetlb_pages", 64),
    "Threads": ("threads", 32),
}


def parse_status(text: str) -> StatusRecord:
    """
    Parse the text of /proc/<pid>/status.

    Unknown keys are ignored (they vary across kernel versions). A known key
    without a value, or a value that is not a decimal number of the field's
    width, raises ParseError and no record is returned.
    """
    values: Dict[str, int] = {}
    for line in split_lines(text):
        tokens = tokenize(line, KEY_VALUE_DELIMS)
        if not tokens:
            continue
        spec = STATUS_FIELDS.get(tokens[0])
        if spec is None:
            continue
        name, bits = spec
        values[name] = parse_int(field_value(tokens, line), bits=bits)

    log.debug("status: %d known fields", len(values))
    return StatusRecord(**values)


def read_status(pid: int, proc_root: Union[str, Path] = DEFAULT_PROC_ROOT) -> StatusRecord:
    """Load /proc/<pid>/status into a StatusRecord."""
    return parse_status(read_proc_text(pid, "status", proc_root))
