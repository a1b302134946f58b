"""LintService: run the adapter conformance linters over configured gateways.

Every gateway gets the :class:`GatewayLinter` checks; every dataset the
gateway currently holds gets the :class:`EnumerableDatasetLinter` checks
against its own contents.
"""

from __future__ import annotations

import logging
from typing import Any

from rommap.errors import DatasetNotFoundError, RomError
from rommap.lint import EnumerableDatasetLinter, GatewayLinter, Linter
from rommap.services.base import BaseService
from rommap.services.result import ServiceResult
from rommap.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class LintService(BaseService):
    """Runs linters and reports every lint outcome."""

    @traced
    def lint(self, name: str | None = None) -> ServiceResult:
        """Lint every configured gateway, or only gateway *name*."""
        gateways = self._container.gateways
        if name is not None and name not in gateways:
            return ServiceResult.failure(
                "lint",
                "UNKNOWN_GATEWAY",
                f"No gateway named {name!r}",
                detail={"known": sorted(gateways)},
            )

        results: list[dict[str, Any]] = []
        for gateway_name in sorted(gateways) if name is None else [name]:
            gateway = gateways[gateway_name]
            scheme = gateway.uri.split("://", 1)[0].split("+", 1)[0]
            with trace_span(f"lint:{gateway_name}"):
                linter = GatewayLinter(scheme, type(gateway), gateway.uri)
                results.extend(_run_all(linter, gateway_name))
                try:
                    dataset_names = gateway.dataset_names()
                except RomError as exc:
                    results.append(_outcome(gateway_name, "datasets", str(exc)))
                    continue
                for dataset_name in dataset_names:
                    try:
                        dataset = gateway.dataset(dataset_name)
                    except DatasetNotFoundError:
                        logger.debug("Dataset %s vanished during lint", dataset_name)
                        continue
                    data = dataset.to_list()
                    results.extend(
                        _run_all(
                            EnumerableDatasetLinter(dataset, data),
                            f"{gateway_name}.{dataset_name}",
                        )
                    )

        failures = [r for r in results if not r["ok"]]
        if failures:
            return ServiceResult.failure(
                "lint",
                "LINT_FAILED",
                f"{len(failures)} of {len(results)} lints failed",
                detail={"failures": failures},
            )
        return ServiceResult.success("lint", {"results": results, "count": len(results)})


def _run_all(linter: Linter, target: str) -> list[dict[str, Any]]:
    """Run every lint of *linter*; gateway errors count as failures too."""
    outcomes: list[dict[str, Any]] = []
    try:
        for lint_name in linter.lints():
            try:
                linter.lint(lint_name)
            except RomError as exc:
                outcomes.append(_outcome(target, lint_name, str(exc)))
                continue
            outcomes.append(_outcome(target, lint_name))
    finally:
        linter.close()
    return outcomes


def _outcome(target: str, lint_name: str, failure: str | None = None) -> dict[str, Any]:
    return {
        "target": target,
        "lint": lint_name,
        "ok": failure is None,
        "message": failure or "",
    }
