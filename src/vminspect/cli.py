from __future__ import annotations

from dataclasses import replace
from typing import Optional

import typer

from vminspect import __version__
from vminspect.config import DEFAULT_CONFIG, InspectConfig, load_config
from vminspect.inspector import SOURCES, MemInspector
from vminspect.logging_config import setup_logging
from vminspect.render import render_json

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="Tool helping to analyse the behaviors of a VM process.",
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog="Tip: use `vminspect COMMAND -h` (or `--help`) to see all options for that command.",
)


def _config(ctx: typer.Context) -> InspectConfig:
    cfg = ctx.obj if isinstance(ctx.obj, InspectConfig) else None
    return cfg or DEFAULT_CONFIG


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING or ERROR (default from config.yaml)."
    ),
):
    if version:
        typer.echo(f"vminspect {__version__}")
        raise typer.Exit()

    cfg = load_config()
    setup_logging(log_level or cfg.log_level)
    ctx.obj = cfg

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def mem(
    ctx: typer.Context,
    pid: int = typer.Option(..., "--pid", "-p", min=1, help="PID of the target VM."),
    status: bool = typer.Option(False, "--status", "-s", help="Show /proc/<pid>/status memory counters."),
    cmdline: bool = typer.Option(False, "--cmdline", "-c", help="Show the command line."),
    smaps: bool = typer.Option(False, "--smaps", "-m", help="Show VMAs from /proc/<pid>/smaps."),
    top: int = typer.Option(0, "--top", "-n", min=0, help="Only list the N biggest VMAs (0 = all)."),
    libs: bool = typer.Option(False, "--libs", help="List the shared libraries summed up in the VMA section."),
    json_out: bool = typer.Option(False, "--json", help="Output JSON only (machine-readable)."),
    proc_root: Optional[str] = typer.Option(None, "--proc-root", help="procfs mount point (default from config.yaml)."),
):
    """Show VM's memory consumption."""
    if not (status or cmdline or smaps):
        typer.echo("[vminspect] Nothing to show. Pick at least one of --status, --cmdline, --smaps.", err=True)
        raise typer.Exit()

    cfg = _config(ctx)
    if proc_root:
        cfg = replace(cfg, proc_root=proc_root)

    inspector = MemInspector(pid, cmd=cmdline, status=status, smaps=smaps, config=cfg)

    # failed sources are reported and skipped, the rest is still printed
    for source in SOURCES:
        err = inspector.errors.get(source)
        if err:
            typer.echo(f"[vminspect] {source}: {err}", err=True)

    if json_out:
        typer.echo(render_json(inspector.snapshot))
        return

    out = inspector.inspect(top=top, show_libs=libs)
    if out:
        typer.echo(out)


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
