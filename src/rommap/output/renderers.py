"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from rommap.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from rommap.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text.assemble(("OK", "rom.ok"), (f"  {result.op}", "rom.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    style = "rom.name" if key == "name" else ""
    console.print(Text.assemble((f"  {key}: ", "rom.key"), (str(value), style)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text(f"  warning: {warning}", style="rom.warning"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "rom.error"), (f"  {result.op}", "rom.op"), ": ", msg))

    if not err or not err.detail:
        return
    failures = err.detail.get("failures")
    if isinstance(failures, list):
        for failure in failures:
            console.print(f"  [rom.error]fail[/rom.error] {failure['target']} {failure['lint']}")
            if verbose:
                console.print(Text(f"    {failure['message']}"))
        return
    if verbose:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_gateways(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    gateways = result.data.get("gateways", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Gateway", style="rom.name", no_wrap=True)
    table.add_column("Adapter", style="rom.adapter")
    table.add_column("Datasets")
    for gateway in gateways:
        table.add_row(
            str(gateway.get("name", "")),
            str(gateway.get("adapter", "")),
            ", ".join(gateway.get("datasets", [])) or "-",
        )
    console.print(table)
    _warnings(console, result)
    if verbose:
        _render_meta(console, result)


def _render_relations(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    relations = result.data.get("relations", [])
    if not relations:
        console.print("No relations registered.")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Relation", style="rom.name", no_wrap=True)
    table.add_column("Gateway")
    table.add_column("Tuples", style="rom.count", justify="right")
    table.add_column("Commands")
    table.add_column("Mappers")
    for relation in relations:
        table.add_row(
            str(relation.get("name", "")),
            str(relation.get("gateway", "")),
            str(relation.get("count", 0)),
            ", ".join(relation.get("commands", [])) or "-",
            ", ".join(relation.get("mappers", [])) or "-",
        )
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_lint(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "lints_passed", result.data.get("count", 0))
    if verbose:
        for outcome in result.data.get("results", []):
            console.print(f"  [rom.ok]pass[/rom.ok] {outcome['target']} {outcome['lint']}")
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "gateways": _render_gateways,
    "relations": _render_relations,
    "lint": _render_lint,
}
