"""Shared fixtures: isolated config dir and a fake procfs tree."""

from pathlib import Path

import pytest

from vminspect import paths

STATUS_TEXT = """Name:\tqemu-system-x86
Umask:\t0022
State:\tS (sleeping)
Tgid:\t4242
Pid:\t4242
PPid:\t1
Groups:\t
VmPeak:\t 4194304 kB
VmSize:\t 4096000 kB
VmLck:\t       0 kB
VmHWM:\t  524288 kB
VmRSS:\t  262144 kB
RssAnon:\t  131072 kB
RssFile:\t  120000 kB
RssShmem:\t   11072 kB
VmData:\t 2000000 kB
VmStk:\t     132 kB
VmExe:\t    6000 kB
VmLib:\t   40000 kB
VmPTE:\t    1200 kB
VmSwap:\t       0 kB
HugetlbPages:\t       0 kB
Threads:\t8
voluntary_ctxt_switches:\t150
"""

CMDLINE_TEXT = "\0".join(["/usr/bin/qemu-system-x86_64", "-m", "512", "-enable-kvm", "-name", "guest0", ""])


def smaps_header(start: str, end: str, notion: str = "", perm: str = "rw-p", inode: int = 0) -> str:
    line = f"{start}-{end} {perm} 00000000 00:00 {inode}"
    if notion:
        line = line.ljust(73) + notion
    return line


def smaps_block(start: str, end: str, rss: int, notion: str = "") -> str:
    return "\n".join(
        [
            smaps_header(start, end, notion),
            "Size:                132 kB",
            "KernelPageSize:        4 kB",
            f"Rss:             {rss:>6} kB",
            f"Pss:             {rss:>6} kB",
            "Shared_Clean:          0 kB",
            "Shared_Dirty:          0 kB",
            "Private_Clean:         0 kB",
            f"Private_Dirty:   {rss:>6} kB",
            "Locked:                0 kB",
            "THPeligible:    0",
            "VmFlags: rd wr mr mw me ac sd",
        ]
    )


SMAPS_TEXT = "\n".join(
    [
        smaps_block("7f1c2a000000", "7f1c2a021000", 100, "/usr/lib64/libc.so.6"),
        smaps_block("7f1c2b000000", "7f1c2b100000", 50),
        smaps_block("55d0c2a1b000", "55d0c2a3c000", 50, "[heap]"),
        smaps_block("7ffd3a1c0000", "7ffd3a1e1000", 0, "[stack]"),
    ]
) + "\n"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config.yaml out of the real home directory."""
    cfg_dir = tmp_path / "config"
    monkeypatch.setattr(paths, "config_dir", lambda: cfg_dir)
    return cfg_dir


@pytest.fixture
def proc_root(tmp_path) -> Path:
    """A fake /proc with pid 4242 carrying status, cmdline and smaps."""
    root = tmp_path / "proc"
    pid_dir = root / "4242"
    pid_dir.mkdir(parents=True)
    (pid_dir / "status").write_text(STATUS_TEXT, encoding="utf-8")
    (pid_dir / "cmdline").write_text(CMDLINE_TEXT, encoding="utf-8")
    (pid_dir / "smaps").write_text(SMAPS_TEXT, encoding="utf-8")
    return root
