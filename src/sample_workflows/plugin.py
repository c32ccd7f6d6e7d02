"""Litestar plugin for sample workflow integration.

This module provides the SampleWorkflowPlugin, which wires the workflow
service and configuration store into a Litestar application and mounts the
officer and admin APIs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002 - needed for DI

from sample_workflows.db.store import GraphStore
from sample_workflows.engine.graph import DEFAULT_MAIN_PATH_MAX_POSITION
from sample_workflows.engine.service import SampleWorkflowService
from sample_workflows.log import configure_logging

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

    from sample_workflows.engine.position import LegacyInferenceStrategy

__all__ = ["SampleWorkflowPlugin", "SampleWorkflowPluginConfig"]


@dataclass
class SampleWorkflowPluginConfig:
    """Configuration for the SampleWorkflowPlugin.

    The host application must provide an ``AsyncSession`` under the
    ``db_session`` dependency key, which is what advanced-alchemy's
    ``SQLAlchemyPlugin`` does by default.

    Attributes:
        dependency_key_service: The key used for dependency injection of the
            SampleWorkflowService. Defaults to "workflow_service".
        dependency_key_graph_store: The key used for dependency injection of
            the GraphStore. Defaults to "graph_store".
        enable_api: Whether to enable the officer REST API. Defaults to True.
        enable_admin_api: Whether to enable the admin REST API. Defaults to True.
        api_path_prefix: URL path prefix for all workflow API endpoints.
            Defaults to "/api".
        api_guards: List of Litestar guards applied to the officer API.
        admin_guards: List of Litestar guards applied to the admin API, in
            addition to ``api_guards``.
        api_tags: OpenAPI tags applied to workflow API endpoints.
        include_api_in_schema: Whether to include API endpoints in the OpenAPI
            schema. Defaults to True.
        main_path_max_position: Highest node position on the main path.
            ``None`` removes the bound.
        legacy_inference: Strategy inferring completion from legacy sample
            fields. Defaults to the node-name heuristic.
        configure_logging: Configure structlog on application start.
        log_level: Log level used when configuring logging.
        json_logs: Render logs as JSON lines.
    """

    dependency_key_service: str = "workflow_service"
    dependency_key_graph_store: str = "graph_store"
    enable_api: bool = True
    enable_admin_api: bool = True
    api_path_prefix: str = "/api"
    api_guards: list[Any] = field(default_factory=list)
    admin_guards: list[Any] = field(default_factory=list)
    api_tags: list[str] = field(default_factory=lambda: ["Workflows"])
    include_api_in_schema: bool = True
    main_path_max_position: int | None = DEFAULT_MAIN_PATH_MAX_POSITION
    legacy_inference: LegacyInferenceStrategy | None = None
    configure_logging: bool = False
    log_level: str = "info"
    json_logs: bool = False


class SampleWorkflowPlugin(InitPluginProtocol):
    """Litestar plugin for sample workflows.

    Example:
        Together with advanced-alchemy's session management::

            from advanced_alchemy.extensions.litestar import (
                AsyncSessionConfig,
                SQLAlchemyAsyncConfig,
                SQLAlchemyPlugin,
            )
            from litestar import Litestar
            from sample_workflows import SampleWorkflowPlugin, SampleWorkflowPluginConfig

            alchemy = SQLAlchemyAsyncConfig(
                connection_string="postgresql+asyncpg://localhost/samples",
                session_config=AsyncSessionConfig(expire_on_commit=False),
            )

            app = Litestar(
                plugins=[
                    SQLAlchemyPlugin(config=alchemy),
                    SampleWorkflowPlugin(config=SampleWorkflowPluginConfig(admin_guards=[require_admin])),
                ]
            )
    """

    __slots__ = ("_config",)

    def __init__(self, config: SampleWorkflowPluginConfig | None = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration for the plugin.
        """
        self._config = config or SampleWorkflowPluginConfig()

    @property
    def config(self) -> SampleWorkflowPluginConfig:
        """The plugin configuration."""
        return self._config

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Initialize the plugin when the Litestar app starts.

        This method:
        1. Optionally configures structlog
        2. Adds dependency providers to the app config
        3. Registers the officer and admin controllers
        4. Registers exception handlers for workflow errors

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.
        """
        if self._config.configure_logging:
            configure_logging(self._config.log_level, json_output=self._config.json_logs)

        config = self._config

        # Create dependency providers
        def provide_workflow_service(db_session: AsyncSession) -> SampleWorkflowService:
            return SampleWorkflowService(
                db_session,
                legacy_inference=config.legacy_inference,
                main_path_max_position=config.main_path_max_position,
            )

        def provide_graph_store(db_session: AsyncSession) -> GraphStore:
            return GraphStore(db_session)

        app_config.dependencies[self._config.dependency_key_service] = Provide(
            provide_workflow_service,
            sync_to_thread=False,
        )
        app_config.dependencies[self._config.dependency_key_graph_store] = Provide(
            provide_graph_store,
            sync_to_thread=False,
        )

        if self._config.enable_api or self._config.enable_admin_api:
            from litestar import Router

            from sample_workflows.web.controllers import (
                SampleWorkflowController,
                WorkflowAdminController,
                WorkflowConfigController,
            )
            from sample_workflows.web.exceptions import exception_handlers

            route_handlers: list[Any] = []
            if self._config.enable_api:
                route_handlers.extend([WorkflowConfigController, SampleWorkflowController])
            if self._config.enable_admin_api:
                route_handlers.append(
                    Router(
                        path="/",
                        route_handlers=[WorkflowAdminController],
                        guards=self._config.admin_guards,
                    )
                )

            workflow_router = Router(
                path=self._config.api_path_prefix,
                route_handlers=route_handlers,
                guards=self._config.api_guards,
                tags=self._config.api_tags,
                include_in_schema=self._config.include_api_in_schema,
            )
            app_config.route_handlers.append(workflow_router)

            for exc_type, handler in exception_handlers.items():
                app_config.exception_handlers.setdefault(exc_type, handler)

        return app_config
