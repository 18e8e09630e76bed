"""Per-archetype backend schema registry.

Maps an ``AppType`` to the tables and REST endpoints its generated server
starts with.  Archetypes without an entry get an empty schema; the backend
generator still seeds a ``users`` model for them.  Register additional
archetypes with :func:`register_archetype`.
"""

from __future__ import annotations

from dataclasses import dataclass

from appforge.models import (
    APIEndpoint,
    AppSpec,
    AppType,
    ColumnType,
    DatabaseColumn,
    DatabaseIndex,
    DatabaseRelation,
    DatabaseTable,
    HTTPMethod,
    RelationType,
)


@dataclass(frozen=True)
class ArchetypeSchema:
    """Tables and endpoints synthesised for one archetype."""

    tables: tuple[DatabaseTable, ...] = ()
    endpoints: tuple[APIEndpoint, ...] = ()


_REGISTRY: dict[AppType, ArchetypeSchema] = {}


def register_archetype(app_type: AppType, schema: ArchetypeSchema, *, replace: bool = False) -> None:
    """Add *schema* for *app_type*.

    Raises:
        ValueError: *app_type* already has a schema and *replace* is false.
    """
    if app_type in _REGISTRY and not replace:
        raise ValueError(f"Archetype '{app_type.value}' is already registered")
    _REGISTRY[app_type] = schema


def schema_for(app_type: AppType) -> ArchetypeSchema:
    return _REGISTRY.get(app_type, ArchetypeSchema())


def registered_types() -> list[AppType]:
    return list(_REGISTRY)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _col(name: str, type: ColumnType = ColumnType.STRING, **kwargs) -> DatabaseColumn:
    return DatabaseColumn(name=name, type=type, **kwargs)


def _pk() -> DatabaseColumn:
    return _col("id", ColumnType.UUID, primary=True)


def _endpoint(
    id: str,
    path: str,
    method: HTTPMethod,
    name: str,
    authentication: bool = False,
) -> APIEndpoint:
    return APIEndpoint(id=id, path=path, method=method, name=name, authentication=authentication)


def auth_users_table() -> DatabaseTable:
    """The ``users`` table used by apps with authentication."""
    return DatabaseTable(
        id="users",
        name="users",
        columns=[
            _pk(),
            _col("email", unique=True, nullable=False),
            _col("password", nullable=False),
            _col("name"),
            _col("role", default="user"),
            _col("created_at", ColumnType.TIMESTAMP),
            _col("updated_at", ColumnType.TIMESTAMP),
        ],
        indexes=[DatabaseIndex(name="email", columns=["email"], unique=True)],
    )


AUTH_ENDPOINTS: tuple[APIEndpoint, ...] = (
    _endpoint("auth-register", "/api/auth/register", HTTPMethod.POST, "Register"),
    _endpoint("auth-login", "/api/auth/login", HTTPMethod.POST, "Login"),
    _endpoint("auth-me", "/api/auth/me", HTTPMethod.GET, "Get Current User", True),
    _endpoint("auth-logout", "/api/auth/logout", HTTPMethod.POST, "Logout", True),
)


# ---------------------------------------------------------------------------
# Built-in archetypes
# ---------------------------------------------------------------------------

register_archetype(
    AppType.BLOG,
    ArchetypeSchema(
        tables=(
            DatabaseTable(
                id="posts",
                name="posts",
                columns=[
                    _pk(),
                    _col("title", nullable=False),
                    _col("slug", unique=True),
                    _col("content", ColumnType.TEXT),
                    _col("excerpt", ColumnType.TEXT),
                    _col("author_id", ColumnType.UUID),
                    _col("status", default="draft"),
                    _col("published_at", ColumnType.TIMESTAMP),
                    _col("created_at", ColumnType.TIMESTAMP),
                ],
                indexes=[DatabaseIndex(name="status", columns=["status", "published_at"])],
                relations=[
                    DatabaseRelation(type=RelationType.BELONGS_TO, table="users", foreign_key="author_id"),
                ],
            ),
            DatabaseTable(
                id="categories",
                name="categories",
                columns=[
                    _pk(),
                    _col("name", nullable=False),
                    _col("slug", unique=True),
                ],
            ),
        ),
        endpoints=(
            _endpoint("posts-list", "/api/posts", HTTPMethod.GET, "List Posts"),
            _endpoint("posts-create", "/api/posts", HTTPMethod.POST, "Create Post", True),
            _endpoint("posts-detail", "/api/posts/:id", HTTPMethod.GET, "Get Post"),
            _endpoint("posts-update", "/api/posts/:id", HTTPMethod.PUT, "Update Post", True),
            _endpoint("posts-delete", "/api/posts/:id", HTTPMethod.DELETE, "Delete Post", True),
            _endpoint("categories-list", "/api/categories", HTTPMethod.GET, "List Categories"),
        ),
    ),
)

register_archetype(
    AppType.ECOMMERCE,
    ArchetypeSchema(
        tables=(
            DatabaseTable(
                id="products",
                name="products",
                columns=[
                    _pk(),
                    _col("name", nullable=False),
                    _col("description", ColumnType.TEXT),
                    _col("price", ColumnType.DECIMAL, nullable=False),
                    _col("image"),
                    _col("stock", ColumnType.INTEGER, default=0),
                    _col("category_id", ColumnType.UUID),
                    _col("created_at", ColumnType.TIMESTAMP),
                ],
            ),
            DatabaseTable(
                id="orders",
                name="orders",
                columns=[
                    _pk(),
                    _col("user_id", ColumnType.UUID, nullable=False),
                    _col("total", ColumnType.DECIMAL, nullable=False),
                    _col("status", default="pending"),
                    _col("shipping_address", ColumnType.TEXT),
                    _col("created_at", ColumnType.TIMESTAMP),
                ],
                indexes=[DatabaseIndex(name="user", columns=["user_id"])],
                relations=[
                    DatabaseRelation(type=RelationType.BELONGS_TO, table="users", foreign_key="user_id"),
                ],
            ),
        ),
        endpoints=(
            _endpoint("products-list", "/api/products", HTTPMethod.GET, "List Products"),
            _endpoint("products-create", "/api/products", HTTPMethod.POST, "Create Product", True),
            _endpoint("products-detail", "/api/products/:id", HTTPMethod.GET, "Get Product"),
            _endpoint("orders-list", "/api/orders", HTTPMethod.GET, "List Orders", True),
            _endpoint("orders-create", "/api/orders", HTTPMethod.POST, "Create Order", True),
            _endpoint("orders-detail", "/api/orders/:id", HTTPMethod.GET, "Get Order", True),
        ),
    ),
)

register_archetype(
    AppType.SAAS,
    ArchetypeSchema(
        tables=(
            DatabaseTable(
                id="subscriptions",
                name="subscriptions",
                columns=[
                    _pk(),
                    _col("user_id", ColumnType.UUID, nullable=False),
                    _col("plan", nullable=False),
                    _col("status", default="active"),
                    _col("current_period_end", ColumnType.TIMESTAMP),
                    _col("created_at", ColumnType.TIMESTAMP),
                ],
                relations=[
                    DatabaseRelation(type=RelationType.BELONGS_TO, table="users", foreign_key="user_id"),
                ],
            ),
            DatabaseTable(
                id="workspaces",
                name="workspaces",
                columns=[
                    _pk(),
                    _col("name", nullable=False),
                    _col("owner_id", ColumnType.UUID, nullable=False),
                    _col("created_at", ColumnType.TIMESTAMP),
                ],
            ),
        ),
        endpoints=(
            _endpoint("workspaces-list", "/api/workspaces", HTTPMethod.GET, "List Workspaces", True),
            _endpoint("workspaces-create", "/api/workspaces", HTTPMethod.POST, "Create Workspace", True),
            _endpoint("subscriptions-list", "/api/subscriptions", HTTPMethod.GET, "List Subscriptions", True),
            _endpoint("subscriptions-create", "/api/subscriptions", HTTPMethod.POST, "Create Subscription", True),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Spec-level views
# ---------------------------------------------------------------------------

def tables_for(spec: AppSpec) -> list[DatabaseTable]:
    """Tables for *spec*: the auth ``users`` table first when auth is on."""
    tables = list(schema_for(spec.type).tables)
    if spec.auth:
        tables.insert(0, auth_users_table())
    return tables


def endpoints_for(spec: AppSpec) -> list[APIEndpoint]:
    """Endpoints for *spec*: auth routes first when auth is on.

    Without auth, the archetype's protected endpoints are served open.
    """
    endpoints = list(schema_for(spec.type).endpoints)
    if not spec.auth:
        return [
            e.model_copy(update={"authentication": False}) if e.authentication else e
            for e in endpoints
        ]
    return [*AUTH_ENDPOINTS, *endpoints]
