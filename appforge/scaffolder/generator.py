"""Main scaffolding orchestrator.

Takes an ``AppSpec`` and composes the frontend, backend, config and
deployment generators into one ``GeneratedApp``.  Generation is pure and
in-memory: every call builds fresh maps and nothing is written to disk
here (see ``appforge.exporter`` for that).
"""

from __future__ import annotations

from appforge.config import Config
from appforge.models import (
    APIEndpoint,
    AppSpec,
    BackendFramework,
    BackendProject,
    BackendResult,
    DatabaseTable,
    GeneratedApp,
)
from appforge.scaffolder.archetypes import endpoints_for, tables_for
from appforge.scaffolder.backend_gen import ExpressStrategy, generate_backend
from appforge.scaffolder.config_gen import ConfigGenerator
from appforge.scaffolder.frontend_gen import FrontendGenerator
from appforge.scaffolder.templates import TemplateRenderer


class AppGenerator:
    """Composes every sub-generator for one ``AppSpec``.

    The instance only holds configuration and a shared template renderer,
    so one generator can serve any number of concurrent calls.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        server = self.config.server
        self.renderer = TemplateRenderer()
        self.frontend_gen = FrontendGenerator(
            self.renderer,
            frontend_port=server.frontend_port,
            server_port=server.port,
        )
        self.config_gen = ConfigGenerator(self.renderer, server_port=server.port)
        self.strategies = {
            BackendFramework.EXPRESS: ExpressStrategy(self.renderer, cors_origin=server.cors_origin),
        }

    # -- Public API --------------------------------------------------------

    def generate_app(
        self,
        spec: AppSpec,
        extra_tables: list[DatabaseTable] | None = None,
    ) -> GeneratedApp:
        """Generate every artefact for *spec*.

        Args:
            spec: The application to generate.
            extra_tables: Additional tables (typically from schema
                inference) appended after the archetype's own tables.

        Returns:
            The assembled ``GeneratedApp``.  The backend map is empty when
            ``spec.database`` is ``none``.
        """
        frontend = self.frontend_gen.generate(spec)
        backend = self.generate_backend(spec, extra_tables).files if spec.has_backend else {}
        config = self.config_gen.generate_config(spec)
        deployment = self.config_gen.generate_deployment(spec)
        return GeneratedApp(frontend=frontend, backend=backend, config=config, deployment=deployment)

    def backend_project(
        self,
        spec: AppSpec,
        extra_tables: list[DatabaseTable] | None = None,
    ) -> BackendProject:
        """Build the backend generator input for *spec*."""
        tables = tables_for(spec) + list(extra_tables or [])
        endpoints: list[APIEndpoint] = endpoints_for(spec)
        return BackendProject(
            name=f"{spec.slug}-server",
            framework=self.config.server.framework,
            database=spec.database,
            tables=tables,
            endpoints=endpoints,
            authentication=spec.auth,
            port=self.config.server.port,
        )

    def generate_backend(
        self,
        spec: AppSpec,
        extra_tables: list[DatabaseTable] | None = None,
    ) -> BackendResult:
        return generate_backend(self.backend_project(spec, extra_tables), self.strategies)


def generate_app(spec: AppSpec) -> GeneratedApp:
    """Generate *spec* with the default configuration."""
    return AppGenerator().generate_app(spec)
