"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich tables and colors) or
machines (--json).  The formatter layer adapts ServiceResult to the
requested output mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rommap.output.renderers import render_result

if TYPE_CHECKING:
    from rommap.services.result import ServiceResult


def format_result(
    result: ServiceResult,
    *,
    json_output: bool = False,
    verbose: bool = False,
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise return Rich-rendered text.
        verbose: Include telemetry and error detail in human output.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    return render_result(result, verbose=verbose)
