from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import cast

from sessionledger.config import Config
from sessionledger.core.repository import Repository, create_repository
from sessionledger.core.tokens import TokenProvider


class Service:
    """Base class for services with access to the repository."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from sessionledger.core.modules.association.service import AssociationService  # noqa: PLC0415
    from sessionledger.core.modules.evidence.service import EvidenceService  # noqa: PLC0415
    from sessionledger.core.modules.lifecycle.service import LifecycleService  # noqa: PLC0415
    from sessionledger.core.modules.session.service import SessionService  # noqa: PLC0415
    from sessionledger.core.modules.user.service import UserService  # noqa: PLC0415

    user: UserService
    session: SessionService
    evidence: EvidenceService
    lifecycle: LifecycleService
    association: AssociationService

    def __init__(self, repository: Repository) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        service_configs = [
            ("user", "sessionledger.core.modules.user.service", "UserService"),
            ("session", "sessionledger.core.modules.session.service", "SessionService"),
            ("evidence", "sessionledger.core.modules.evidence.service", "EvidenceService"),
            ("lifecycle", "sessionledger.core.modules.lifecycle.service", "LifecycleService"),
            ("association", "sessionledger.core.modules.association.service", "AssociationService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(repository)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, repository, token provider, and all service instances."""

    config: Config
    repository: Repository
    tokens: TokenProvider
    services: Services

    def __init__(self, config: Config, repository: Repository | None = None, tokens: TokenProvider | None = None) -> None:
        """Initialize core with config and storage, and auto-register services."""
        self.config = config
        self.repository = repository or create_repository(config.database_url)
        self.tokens = tokens or TokenProvider()
        self.services = Services(self.repository)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.repository.on_start()
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and release storage on shutdown."""
        await self.services.stop_all()
        await self.repository.on_stop()
