"""
EventDesk CLI Wiring
====================
Constructs the catalog service for a shell run.

This module is adapter-only glue:
- one backend, one catalog, one service per process
- loading and seeding happen here, not in the engine
"""

from __future__ import annotations

import logging
from typing import Optional

from core.config.settings import StorageSettings
from core.records.backend import FileRecordBackend, RecordBackend
from engines.catalog.repository import EventCatalog
from engines.catalog.service import CatalogService

logger = logging.getLogger("eventdesk.cli")


def configure_logging(settings: StorageSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_service(
    settings: StorageSettings,
    backend: Optional[RecordBackend] = None,
) -> CatalogService:
    """Load the catalog from `backend` (files under data_dir by default)."""
    if backend is None:
        backend = FileRecordBackend(settings.data_dir)
    catalog = EventCatalog(backend, file_names=settings.file_names)
    reports = catalog.load()
    skipped = sum(len(report.skipped) for report in reports.values())
    if skipped:
        logger.warning("Skipped %d malformed records while loading.", skipped)

    service = CatalogService(catalog, export_names=settings.export_names)
    if settings.seed_on_empty:
        service.seed_initial_data()
    return service
