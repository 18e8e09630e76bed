"""Template catalog: canonical ``AppSpec`` per application archetype.

Pure data.  Every entry is constructed through ``AppSpec`` so the model
invariants are checked when this module is imported.
"""

from __future__ import annotations

from appforge.models import AppSpec, AppType, Database, DeploymentTarget, UiKit


class UnknownArchetypeError(LookupError):
    """Raised by :func:`require` when the archetype is not in the catalog."""

    def __init__(self, app_type: str) -> None:
        self.app_type = app_type
        super().__init__(f"Unknown application type: {app_type!r}")


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------

_CATALOG: dict[AppType, AppSpec] = {
    AppType.SAAS: AppSpec(
        name="SaaS Application",
        type=AppType.SAAS,
        description="Full-featured SaaS with authentication, dashboard, and billing",
        features=("Authentication", "Dashboard", "User Management", "Settings", "Billing", "API Routes"),
        pages=("Landing", "Login", "Register", "Dashboard", "Settings", "Pricing"),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.TAILWIND,
        deployment=DeploymentTarget.VERCEL,
    ),
    AppType.BLOG: AppSpec(
        name="Blog Platform",
        type=AppType.BLOG,
        description="Content management system with posts, categories, and comments",
        features=("Posts", "Categories", "Comments", "Search", "Tags", "RSS Feed"),
        pages=("Home", "Blog", "Post Detail", "About", "Contact", "Categories"),
        database=Database.POSTGRESQL,
        auth=False,
        ui=UiKit.TAILWIND,
        deployment=DeploymentTarget.VERCEL,
    ),
    AppType.ECOMMERCE: AppSpec(
        name="E-commerce Store",
        type=AppType.ECOMMERCE,
        description="Online store with products, cart, checkout, and payments",
        features=("Products", "Cart", "Checkout", "Payments", "Orders", "Inventory"),
        pages=("Home", "Shop", "Product Detail", "Cart", "Checkout", "Account"),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.TAILWIND,
        deployment=DeploymentTarget.VERCEL,
    ),
    AppType.DASHBOARD: AppSpec(
        name="Admin Dashboard",
        type=AppType.DASHBOARD,
        description="Analytics dashboard with charts, tables, and reports",
        features=("Analytics", "Charts", "Tables", "Reports", "Export", "Real-time Data"),
        pages=("Dashboard", "Analytics", "Users", "Settings", "Reports", "Activity"),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.SHADCN,
        deployment=DeploymentTarget.VERCEL,
    ),
    AppType.PORTFOLIO: AppSpec(
        name="Portfolio Website",
        type=AppType.PORTFOLIO,
        description="Personal portfolio with projects, skills, and contact",
        features=("Projects", "Skills", "Timeline", "Contact Form", "Resume", "Testimonials"),
        pages=("Home", "About", "Projects", "Blog", "Contact", "Resume"),
        database=Database.NONE,
        auth=False,
        ui=UiKit.TAILWIND,
        deployment=DeploymentTarget.NETLIFY,
    ),
    AppType.CRM: AppSpec(
        name="CRM System",
        type=AppType.CRM,
        description="Customer relationship management with contacts, deals, and tasks",
        features=("Contacts", "Deals", "Tasks", "Notes", "Pipeline", "Reports"),
        pages=("Dashboard", "Contacts", "Deals", "Tasks", "Calendar", "Reports"),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.SHADCN,
        deployment=DeploymentTarget.VERCEL,
    ),
    AppType.CHAT: AppSpec(
        name="Chat Application",
        type=AppType.CHAT,
        description="Real-time messaging with channels, DMs, and notifications",
        features=("Real-time Chat", "Channels", "Direct Messages", "File Sharing", "Notifications", "Online Status"),
        pages=("Login", "Chat", "Channels", "Direct Messages", "Settings", "Profile"),
        database=Database.MONGODB,
        auth=True,
        ui=UiKit.TAILWIND,
        deployment=DeploymentTarget.RAILWAY,
    ),
    AppType.CMS: AppSpec(
        name="Content Management",
        type=AppType.CMS,
        description="Headless CMS with content types, media library, and API",
        features=("Content Types", "Media Library", "API", "Users", "Roles", "Versioning"),
        pages=("Admin", "Content", "Media", "Users", "Settings", "API Docs"),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.SHADCN,
        deployment=DeploymentTarget.RAILWAY,
    ),
    AppType.LANDING: AppSpec(
        name="Landing Page",
        type=AppType.LANDING,
        description="Product landing page with hero, features, pricing, and signup",
        features=("Hero", "Features", "Pricing", "Testimonials", "FAQ", "Newsletter"),
        pages=("Landing", "Pricing", "About", "Contact"),
        database=Database.NONE,
        auth=False,
        ui=UiKit.TAILWIND,
        deployment=DeploymentTarget.NETLIFY,
    ),
    AppType.ADMIN: AppSpec(
        name="Admin Panel",
        type=AppType.ADMIN,
        description="Back-office admin panel with user, role, and audit management",
        features=("User Management", "Roles", "Audit Log", "Settings", "Reports", "Notifications"),
        pages=("Admin", "Users", "Roles", "Audit Log", "Settings"),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.SHADCN,
        deployment=DeploymentTarget.RENDER,
    ),
    AppType.CUSTOM: AppSpec(
        name="Custom Application",
        type=AppType.CUSTOM,
        description="Build your own custom application",
        features=(),
        pages=(),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.TAILWIND,
        deployment=DeploymentTarget.VERCEL,
    ),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def lookup(app_type: AppType | str) -> AppSpec | None:
    """Return the canonical spec for *app_type*, or ``None`` if unknown.

    Accepts either an ``AppType`` or its raw string value, so untrusted input
    (CLI arguments, request bodies) can be passed straight through.
    """
    try:
        key = AppType(app_type)
    except ValueError:
        return None
    return _CATALOG.get(key)


def require(app_type: AppType | str) -> AppSpec:
    """Like :func:`lookup` but raises ``UnknownArchetypeError`` on a miss."""
    spec = lookup(app_type)
    if spec is None:
        raise UnknownArchetypeError(str(app_type))
    return spec


def available_types() -> list[AppType]:
    """Return every archetype present in the catalog, in declaration order."""
    return list(_CATALOG)
