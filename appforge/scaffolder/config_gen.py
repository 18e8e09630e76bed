"""Root packaging and deployment artefacts.

Produces the files that sit at the project root (``package.json``,
``.env.example``, ``README.md``, ``tsconfig.json`` and, for projects with a
server, a ``Dockerfile``) and the per-provider deployment descriptors.
"""

from __future__ import annotations

import json
from typing import Any

from appforge.models import AppConfigFiles, AppSpec, DeploymentTarget, UiKit
from appforge.scaffolder.backend_gen import (
    backend_dependencies,
    is_document_store,
    pinned,
    sql_dialect,
)
from appforge.scaffolder.templates import TemplateRenderer
from appforge.utils import capitalize, snake_slugify


FRONTEND_DEPENDENCIES: dict[str, str] = {
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
    "react-router-dom": "^6.20.0",
    "clsx": "^2.0.0",
    "tailwind-merge": "^2.1.0",
}

FRONTEND_DEV_DEPENDENCIES: dict[str, str] = {
    "@types/node": "^20.10.0",
    "@types/react": "^18.2.0",
    "@types/react-dom": "^18.2.0",
    "@vitejs/plugin-react": "^4.2.0",
    "autoprefixer": "^10.4.16",
    "eslint": "^8.55.0",
    "postcss": "^8.4.32",
    "tailwindcss": "^3.4.0",
    "typescript": "^5.3.0",
    "vite": "^5.0.0",
}

AUTH_SDK = {"@supabase/supabase-js": "^2.39.0"}
ANIMATION_PLUGIN = {"tailwindcss-animate": "^1.0.7"}

UI_LABELS: dict[UiKit, str] = {
    UiKit.TAILWIND: "TailwindCSS",
    UiKit.SHADCN: "TailwindCSS + shadcn/ui",
    UiKit.MATERIAL: "TailwindCSS (Material styling)",
    UiKit.CHAKRA: "TailwindCSS (Chakra styling)",
    UiKit.DAISYUI: "TailwindCSS + daisyUI",
}

_NO_ENV = "# No environment variables required\n"


class ConfigGenerator:
    """Assembles root config files and deployment descriptors for a spec."""

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        *,
        server_port: int = 3000,
    ) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.server_port = server_port

    # -- Public API --------------------------------------------------------

    def generate_config(self, spec: AppSpec) -> AppConfigFiles:
        """Return the root packaging files for *spec*."""
        context = self._build_context(spec)
        return AppConfigFiles(
            package_manifest=self.package_manifest(spec),
            env_example=self.env_example(spec),
            readme=self.renderer.render("project/README.md.j2", context),
            dockerfile=(
                self.renderer.render("project/Dockerfile.j2", context)
                if spec.has_backend
                else None
            ),
            ts_config=self.ts_config(),
        )

    def generate_deployment(self, spec: AppSpec) -> dict[str, dict[str, str]]:
        """Return ``provider -> (path -> content)`` for *spec*'s target.

        Only ``vercel`` and ``netlify`` produce descriptors; other targets
        yield an empty map.
        """
        if spec.deployment is DeploymentTarget.VERCEL:
            vercel = {
                "buildCommand": "npm run build",
                "outputDirectory": "dist",
                "framework": "vite",
                "rewrites": [{"source": "/(.*)", "destination": "/index.html"}],
            }
            return {
                "vercel": {
                    "vercel.json": _dump_json(vercel),
                    ".vercelignore": self.renderer.render("deploy/vercelignore.j2", {}),
                }
            }
        if spec.deployment is DeploymentTarget.NETLIFY:
            return {"netlify": {"netlify.toml": self.renderer.render("deploy/netlify.toml.j2", {})}}
        return {}

    # -- Individual files --------------------------------------------------

    def package_manifest(self, spec: AppSpec) -> str:
        scripts = {
            "dev": "vite",
            "build": "tsc && vite build",
            "lint": "eslint .",
            "preview": "vite preview",
        }
        dependencies = dict(FRONTEND_DEPENDENCIES)
        dev_dependencies = dict(FRONTEND_DEV_DEPENDENCIES)

        if spec.has_backend:
            scripts["server"] = "node server/index.js"
            dependencies.update(pinned(backend_dependencies(spec.database)))
        if spec.auth:
            dependencies.update(AUTH_SDK)
        if spec.ui is UiKit.SHADCN:
            dev_dependencies.update(ANIMATION_PLUGIN)

        manifest = {
            "name": spec.slug,
            "version": "0.1.0",
            "private": True,
            "type": "module",
            "scripts": scripts,
            "dependencies": dict(sorted(dependencies.items())),
            "devDependencies": dict(sorted(dev_dependencies.items())),
        }
        return _dump_json(manifest)

    def env_example(self, spec: AppSpec) -> str:
        """Compose the root env template from the blocks that apply."""
        blocks: list[str] = []
        if spec.has_backend:
            blocks.append(
                "# Server\n"
                f"PORT={self.server_port}\n"
                "NODE_ENV=development\n"
                f"VITE_API_URL=http://localhost:{self.server_port}\n"
            )
            blocks.append(_database_block(spec))
        if spec.auth:
            blocks.append(
                "# Authentication\n"
                "JWT_SECRET=your-super-secret-key\n"
                "JWT_EXPIRE=7d\n"
                "VITE_SUPABASE_URL=\n"
                "VITE_SUPABASE_ANON_KEY=\n"
            )
        return "\n".join(blocks) if blocks else _NO_ENV

    @staticmethod
    def ts_config() -> str:
        return _dump_json(
            {
                "compilerOptions": {
                    "target": "ES2020",
                    "useDefineForClassFields": True,
                    "lib": ["ES2020", "DOM", "DOM.Iterable"],
                    "module": "ESNext",
                    "skipLibCheck": True,
                    "moduleResolution": "bundler",
                    "allowImportingTsExtensions": True,
                    "resolveJsonModule": True,
                    "isolatedModules": True,
                    "noEmit": True,
                    "jsx": "react-jsx",
                    "strict": True,
                    "noUnusedLocals": True,
                    "noUnusedParameters": True,
                    "noFallthroughCasesInSwitch": True,
                    "allowUmdGlobalAccess": True,
                    "baseUrl": ".",
                    "paths": {"@/*": ["./src/*"]},
                },
                "include": ["src"],
            }
        )

    # -- Internals ---------------------------------------------------------

    def _build_context(self, spec: AppSpec) -> dict[str, Any]:
        return {
            "app_name": spec.name,
            "description": spec.description,
            "features": list(spec.features),
            "has_backend": spec.has_backend,
            "server_port": self.server_port,
            "ui_label": UI_LABELS[spec.ui],
            "database_label": capitalize(spec.database.value),
            "deployment_label": capitalize(spec.deployment.value),
        }


def _database_block(spec: AppSpec) -> str:
    name = snake_slugify(spec.name) or "app"
    if is_document_store(spec.database):
        return f"# Database\nMONGODB_URI=mongodb://localhost:27017/{name}\n"
    dialect = sql_dialect(spec.database)
    if dialect == "sqlite":
        return f"# Database\nDB_STORAGE=./{name}.sqlite\n"
    port, user = (3306, "root") if dialect == "mysql" else (5432, "postgres")
    return (
        "# Database\n"
        "DB_HOST=localhost\n"
        f"DB_PORT={port}\n"
        f"DB_NAME={name}\n"
        f"DB_USER={user}\n"
        "DB_PASSWORD=your_password\n"
    )


def _dump_json(data: Any) -> str:
    return json.dumps(data, indent=2) + "\n"


def generate_config(spec: AppSpec) -> AppConfigFiles:
    return ConfigGenerator().generate_config(spec)


def generate_deployment_config(spec: AppSpec) -> dict[str, dict[str, str]]:
    return ConfigGenerator().generate_deployment(spec)
