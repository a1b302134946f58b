"""Read-only views of a container: gateways, datasets and relations."""

from __future__ import annotations

import logging
from typing import Any

from rommap.errors import RomError
from rommap.services.base import BaseService
from rommap.services.result import ServiceResult
from rommap.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class CatalogService(BaseService):
    """Describe what a container is connected to."""

    @traced
    def list_gateways(self) -> ServiceResult:
        gateways: list[dict[str, Any]] = []
        warnings: list[str] = []
        for name, gateway in sorted(self._container.gateways.items()):
            with trace_span(f"gateway:{name}"):
                try:
                    datasets = gateway.dataset_names()
                except (RomError, OSError) as exc:
                    logger.warning("Could not list datasets of gateway %s", name, exc_info=True)
                    warnings.append(f"{name}: {exc}")
                    datasets = []
            gateways.append(
                {
                    "name": name,
                    "adapter": gateway.adapter,
                    "datasets": datasets,
                }
            )
        return ServiceResult.success(
            "gateways",
            {"gateways": gateways, "count": len(gateways)},
            warnings=warnings,
        )

    @traced
    def list_relations(self) -> ServiceResult:
        relations: list[dict[str, Any]] = []
        for name, relation in sorted(self._container.relations.items()):
            relations.append(
                {
                    "name": name,
                    "gateway": relation.gateway,
                    "primary_key": list(relation.primary_key),
                    "commands": sorted(self._container.commands[name]),
                    "mappers": sorted(self._container.mappers[name]),
                    "count": relation.count(),
                }
            )
        return ServiceResult.success(
            "relations",
            {"relations": relations, "count": len(relations)},
        )
