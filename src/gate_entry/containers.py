"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from gate_entry.adapters.local_visitor_repository import (
    JsonFileKeyValueStore,
    LocalVisitorRepository,
)
from gate_entry.adapters.supabase_visitor_repository import SupabaseVisitorRepository
from gate_entry.config import Settings, is_supabase_configured
from gate_entry.services.visitors import VisitorRepository, VisitorService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    visitor_repository: VisitorRepository
    visitor_service: VisitorService
    close_resources: Callable[[], Awaitable[None]]


def build_visitor_repository(settings: Settings) -> VisitorRepository:
    """Pick Supabase when configured, otherwise the local JSON store."""
    if is_supabase_configured(settings):
        client = create_client(
            settings.supabase_url or "", settings.supabase_service_key or ""
        )
        return SupabaseVisitorRepository(client)
    logger.warning(
        "Supabase is not configured; storing visitors locally in %s",
        settings.local_store_path,
    )
    store = JsonFileKeyValueStore(Path(settings.local_store_path))
    return LocalVisitorRepository(store)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    visitor_repository = build_visitor_repository(resolved_settings)
    visitor_service = VisitorService(
        repository=visitor_repository,
        max_photo_chars=resolved_settings.photo_max_chars,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        visitor_repository=visitor_repository,
        visitor_service=visitor_service,
        close_resources=close_resources,
    )
