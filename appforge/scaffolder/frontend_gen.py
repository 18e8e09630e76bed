"""Frontend file-map generation.

Produces a Vite + React single-page-application shell for an ``AppSpec``:
the fixed bootstrap set, one component per page, and the optional auth and
dashboard-shell modules.  Stylesheet and Tailwind config come in two
variants selected by ``spec.ui``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from appforge.models import AppSpec, AppType, UiKit
from appforge.scaffolder.templates import TemplateRenderer
from appforge.utils import component_name, route_path


class StyleVariant(str, Enum):
    """Stylesheet flavour emitted for a UI kit."""
    UTILITY = "utility"
    TOKENS = "tokens"


class PageKind(str, Enum):
    """Template family used for a page."""
    LANDING = "landing"
    OVERVIEW = "overview"
    PLACEHOLDER = "placeholder"


STYLE_VARIANTS: dict[UiKit, StyleVariant] = {
    UiKit.TAILWIND: StyleVariant.UTILITY,
    UiKit.SHADCN: StyleVariant.TOKENS,
    UiKit.MATERIAL: StyleVariant.UTILITY,
    UiKit.CHAKRA: StyleVariant.UTILITY,
    UiKit.DAISYUI: StyleVariant.UTILITY,
}

LANDING_PAGES = frozenset({"Landing", "Home"})
OVERVIEW_PAGES = frozenset({"Dashboard", "Admin"})
LAYOUT_TYPES = frozenset({AppType.DASHBOARD, AppType.CRM})

# Page names served by the generated auth pages when auth is enabled.
AUTH_COMPONENTS: dict[str, str] = {"Login": "LoginPage", "Register": "RegisterPage"}

_COLOR_TOKENS = ("primary", "secondary", "destructive", "muted", "accent", "popover", "card")


def page_kind(page: str) -> PageKind:
    """Pick the template family for *page* by exact name match."""
    if page in LANDING_PAGES:
        return PageKind.LANDING
    if page in OVERVIEW_PAGES:
        return PageKind.OVERVIEW
    return PageKind.PLACEHOLDER


@dataclass(frozen=True)
class PageRoute:
    """One ``<Route>`` entry of the root component."""

    path: str
    component: str
    in_layout: bool = False


def uses_layout(spec: AppSpec) -> bool:
    return spec.type in LAYOUT_TYPES


def _page_components(spec: AppSpec) -> dict[str, str]:
    """Map component name -> page name, first occurrence wins."""
    components: dict[str, str] = {}
    for page in spec.pages:
        components.setdefault(component_name(page), page)
    return components


def plan_routes(spec: AppSpec) -> list[PageRoute]:
    """Compute the root component's route table.

    The first page is also mounted at ``/``.  Auth pages are appended when
    auth is on and no page already claims their path.  Pages are wrapped in
    the dashboard shell when one is emitted, auth pages never are.
    """
    layout = uses_layout(spec)
    auth_components = set(AUTH_COMPONENTS.values()) if spec.auth else set()
    routes: list[PageRoute] = []
    seen: set[str] = set()

    def add(path: str, component: str) -> None:
        if path in seen:
            return
        seen.add(path)
        routes.append(PageRoute(path, component, layout and component not in auth_components))

    pages = _page_components(spec)
    for index, (component, page) in enumerate(pages.items()):
        if index == 0:
            add("/", component)
        add(route_path(page), component)

    if spec.auth:
        add("/login", "LoginPage")
        add("/register", "RegisterPage")
    return routes


def _nav_links(spec: AppSpec) -> list[dict[str, str]]:
    return [
        {"name": page, "path": route_path(page)}
        for component, page in _page_components(spec).items()
        if not (spec.auth and component in AUTH_COMPONENTS.values())
    ]


class FrontendGenerator:
    """Builds the frontend ``path -> content`` map for one spec."""

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        *,
        frontend_port: int = 5173,
        server_port: int = 3000,
    ) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.frontend_port = frontend_port
        self.server_port = server_port

    # -- Public API --------------------------------------------------------

    def generate(self, spec: AppSpec) -> dict[str, str]:
        """Return the complete frontend file map for *spec*."""
        context = self._build_context(spec)
        variant = STYLE_VARIANTS[spec.ui]

        files: dict[str, str] = self.renderer.render_map(
            {
                "index.html": "frontend/index.html.j2",
                "src/main.tsx": "frontend/main.tsx.j2",
                "src/App.tsx": "frontend/App.tsx.j2",
                "src/index.css": f"frontend/styles/{variant.value}.css.j2",
                "src/lib/utils.ts": "frontend/utils.ts.j2",
                "tailwind.config.js": f"frontend/styles/tailwind.{variant.value}.js.j2",
                "postcss.config.js": "frontend/postcss.config.js.j2",
                "vite.config.ts": "frontend/vite.config.ts.j2",
            },
            context,
        )
        if variant is StyleVariant.TOKENS:
            files["components.json"] = self.renderer.render("frontend/components.json.j2", context)

        files.update(self._pages(spec, context))

        if spec.auth:
            files.update(
                self.renderer.render_map(
                    {
                        "src/context/AuthContext.tsx": "frontend/AuthContext.tsx.j2",
                        "src/pages/LoginPage.tsx": "frontend/pages/login.tsx.j2",
                        "src/pages/RegisterPage.tsx": "frontend/pages/register.tsx.j2",
                    },
                    context,
                )
            )

        if context["with_layout"]:
            files.update(
                self.renderer.render_map(
                    {
                        "src/components/Layout.tsx": "frontend/components/Layout.tsx.j2",
                        "src/components/Sidebar.tsx": "frontend/components/Sidebar.tsx.j2",
                        "src/components/Header.tsx": "frontend/components/Header.tsx.j2",
                    },
                    context,
                )
            )
        return files

    # -- Internals ---------------------------------------------------------

    def _build_context(self, spec: AppSpec) -> dict[str, Any]:
        routes = plan_routes(spec)
        components = list(dict.fromkeys(route.component for route in routes))
        nav_links = _nav_links(spec)
        after_auth = next(
            (link["path"] for link in nav_links if page_kind(link["name"]) is PageKind.OVERVIEW),
            "/",
        )
        return {
            "app_name": spec.name,
            "app_type": spec.type.value,
            "description": spec.description,
            "features": list(spec.features[:6]),
            "auth": spec.auth,
            "auth_base": "/api/auth",
            "after_auth_path": after_auth,
            "with_layout": uses_layout(spec),
            "routes": routes,
            "components": components,
            "nav_links": nav_links,
            "color_tokens": _COLOR_TOKENS,
            "has_backend": spec.has_backend,
            "frontend_port": self.frontend_port,
            "server_port": self.server_port,
        }

    def _pages(self, spec: AppSpec, context: dict[str, Any]) -> dict[str, str]:
        files: dict[str, str] = {}
        has_landing = False
        for component, page in _page_components(spec).items():
            if spec.auth and component in AUTH_COMPONENTS.values():
                continue
            kind = page_kind(page)
            has_landing = has_landing or kind is PageKind.LANDING
            page_context = {
                **context,
                "component": component,
                "title": f"{page} Overview" if kind is PageKind.OVERVIEW else page,
                "blurb": f"{page} page for {spec.name}.",
                "headline": spec.description or spec.name,
                "tagline": f"Build better {spec.type.value} applications faster with our modern platform.",
                "cta_path": "/register" if spec.auth else "#features",
            }
            files[f"src/pages/{component}.tsx"] = self.renderer.render(
                f"frontend/pages/{kind.value}.tsx.j2", page_context
            )

        if has_landing:
            files.update(
                self.renderer.render_map(
                    {
                        "src/components/Navbar.tsx": "frontend/components/Navbar.tsx.j2",
                        "src/components/Footer.tsx": "frontend/components/Footer.tsx.j2",
                    },
                    context,
                )
            )
        return files


def generate_frontend(spec: AppSpec) -> dict[str, str]:
    """Module-level convenience wrapper around ``FrontendGenerator``."""
    return FrontendGenerator().generate(spec)
