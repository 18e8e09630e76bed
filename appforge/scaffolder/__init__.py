"""appforge scaffolder -- generates complete project file maps.

Quick usage::

    from appforge.catalog import require
    from appforge.scaffolder import AppGenerator

    app = AppGenerator().generate_app(require("blog"))
    print(app.summary())
"""

from appforge.scaffolder.backend_gen import generate_api_docs, generate_backend, generate_migration
from appforge.scaffolder.config_gen import generate_config, generate_deployment_config
from appforge.scaffolder.frontend_gen import generate_frontend
from appforge.scaffolder.generator import AppGenerator, generate_app
from appforge.scaffolder.templates import TemplateRenderer

__all__ = [
    "AppGenerator",
    "TemplateRenderer",
    "generate_api_docs",
    "generate_app",
    "generate_backend",
    "generate_config",
    "generate_deployment_config",
    "generate_frontend",
    "generate_migration",
]
