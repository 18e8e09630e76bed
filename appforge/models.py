"""Pydantic v2 models for the appforge scaffolding engine.

Defines the declarative application description (``AppSpec``), the database
and API descriptions consumed by the backend generator, and the
``GeneratedApp`` bundle produced by the orchestrator.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from appforge.utils import slugify


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class AppType(str, Enum):
    """Named application archetype."""
    SAAS = "saas"
    BLOG = "blog"
    ECOMMERCE = "ecommerce"
    DASHBOARD = "dashboard"
    PORTFOLIO = "portfolio"
    CRM = "crm"
    CHAT = "chat"
    CMS = "cms"
    LANDING = "landing"
    ADMIN = "admin"
    CUSTOM = "custom"


class Database(str, Enum):
    """Database backing the generated server. ``NONE`` means frontend only."""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    SUPABASE = "supabase"
    SQLITE = "sqlite"
    NONE = "none"


class UiKit(str, Enum):
    """UI kit used for the generated frontend."""
    TAILWIND = "tailwind"
    SHADCN = "shadcn"
    MATERIAL = "material"
    CHAKRA = "chakra"
    DAISYUI = "daisyui"


class DeploymentTarget(str, Enum):
    """Hosting provider the project is prepared for."""
    VERCEL = "vercel"
    NETLIFY = "netlify"
    RAILWAY = "railway"
    RENDER = "render"
    NONE = "none"


class AppMode(str, Enum):
    """Which halves of the project are generated."""
    FULLSTACK = "fullstack"
    FRONTEND = "frontend"
    BACKEND_ONLY = "backend-only"


class BackendFramework(str, Enum):
    """Selectable server framework identifiers."""
    EXPRESS = "express"
    FASTIFY = "fastify"
    NESTJS = "nestjs"
    DJANGO = "django"
    LARAVEL = "laravel"


class HTTPMethod(str, Enum):
    """Supported HTTP methods for API endpoints."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ColumnType(str, Enum):
    """Semantic column type, mapped to concrete types by each generator."""
    UUID = "uuid"
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    ARRAY = "array"


class RelationType(str, Enum):
    """Declarative relation kinds between tables."""
    HAS_ONE = "hasOne"
    HAS_MANY = "hasMany"
    BELONGS_TO = "belongsTo"
    BELONGS_TO_MANY = "belongsToMany"


_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Database Models
# ---------------------------------------------------------------------------

class DatabaseColumn(BaseModel):
    """A single column of a table (or field of a document collection)."""
    model_config = _CAMEL_CONFIG

    name: str = Field(..., description="Column name")
    type: ColumnType = Field(default=ColumnType.STRING, description="Semantic column type")
    nullable: Optional[bool] = Field(default=None, description="Whether NULL is allowed")
    default: Optional[Any] = Field(default=None, description="Default value, if any")
    primary: bool = Field(default=False, description="Whether this is the primary key")
    unique: bool = Field(default=False, description="Whether values must be unique")
    auto_increment: bool = Field(default=False, description="Whether values auto-increment")

    @property
    def required(self) -> bool:
        """A column is required unless it was explicitly declared nullable."""
        return not self.nullable

    @property
    def has_default(self) -> bool:
        return self.default is not None


class DatabaseIndex(BaseModel):
    """A named index over one or more columns."""
    model_config = _CAMEL_CONFIG

    name: str = Field(..., description="Index name, unique within its table")
    columns: list[str] = Field(..., description="Indexed columns, in order")
    unique: bool = Field(default=False, description="Whether this is a unique index")


class DatabaseRelation(BaseModel):
    """A declarative relation to another table."""
    model_config = _CAMEL_CONFIG

    type: RelationType = Field(..., description="Relation kind")
    table: str = Field(..., description="Related table name")
    foreign_key: str = Field(..., description="Foreign key column")
    local_key: Optional[str] = Field(default=None, description="Local key column")


class DatabaseTable(BaseModel):
    """A table (or collection) definition.

    Exactly one column must be the primary key.
    """
    model_config = _CAMEL_CONFIG

    id: str = Field(..., description="Stable identifier of the table definition")
    name: str = Field(..., description="Table name")
    columns: list[DatabaseColumn] = Field(..., description="Columns, in declaration order")
    indexes: list[DatabaseIndex] = Field(default_factory=list, description="Indexes")
    relations: list[DatabaseRelation] = Field(default_factory=list, description="Relations")

    @model_validator(mode="after")
    def _single_primary_key(self) -> "DatabaseTable":
        primaries = [c.name for c in self.columns if c.primary]
        if len(primaries) != 1:
            raise ValueError(
                f"Table '{self.name}' must have exactly one primary column, "
                f"found {len(primaries)}: {primaries}"
            )
        return self

    @property
    def primary_key(self) -> DatabaseColumn:
        return next(c for c in self.columns if c.primary)

    @property
    def model_name(self) -> str:
        """Name of the generated model class (``posts`` -> ``Posts``)."""
        return self.name[:1].upper() + self.name[1:]


# ---------------------------------------------------------------------------
# API Models
# ---------------------------------------------------------------------------

class APIEndpoint(BaseModel):
    """A single REST API endpoint."""
    model_config = _CAMEL_CONFIG

    id: str = Field(..., description="Stable endpoint identifier")
    path: str = Field(..., description="URL path, e.g. '/api/posts/:id'")
    method: HTTPMethod = Field(..., description="HTTP method")
    name: str = Field(..., description="Human-readable endpoint name")
    description: Optional[str] = Field(default=None, description="What this endpoint does")
    request_schema: Optional[dict[str, Any]] = Field(
        default=None, description="JSON schema for the request body"
    )
    response_schema: Optional[dict[str, Any]] = Field(
        default=None, description="JSON schema for the response body"
    )
    authentication: bool = Field(default=False, description="Whether a bearer token is required")
    middleware: list[str] = Field(default_factory=list, description="Extra middleware names")

    @property
    def segments(self) -> list[str]:
        return [s for s in self.path.split("/") if s]

    @property
    def first_segment(self) -> str:
        """The router this endpoint is mounted under (``/api/posts`` -> ``api``)."""
        segments = self.segments
        return segments[0] if segments else "root"

    @property
    def resource(self) -> str:
        """The resource name below the router (``/api/posts/:id`` -> ``posts``)."""
        segments = self.segments
        return segments[1] if len(segments) > 1 else ""

    @property
    def router_path(self) -> str:
        """Path relative to the router mount point."""
        rest = self.segments[1:]
        return "/" + "/".join(rest) if rest else "/"

    @property
    def has_id_param(self) -> bool:
        return ":id" in self.path


# ---------------------------------------------------------------------------
# Application Spec
# ---------------------------------------------------------------------------

class AppSpec(BaseModel):
    """Declarative description of the application to generate.

    Instances are immutable.  Mode normalisation is applied on construction:
    ``frontend`` mode drops the database and auth, ``backend-only`` mode
    drops pages and features.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name of the application")
    type: AppType = Field(default=AppType.CUSTOM, description="Archetype")
    description: str = Field(default="", description="Short description")
    features: tuple[str, ...] = Field(default=(), description="Ordered feature list")
    pages: tuple[str, ...] = Field(default=(), description="Ordered page list")
    database: Database = Field(default=Database.NONE, description="Database choice")
    auth: bool = Field(default=False, description="Whether authentication is generated")
    ui: UiKit = Field(default=UiKit.TAILWIND, description="UI kit")
    deployment: DeploymentTarget = Field(
        default=DeploymentTarget.NONE, description="Deployment target"
    )
    mode: AppMode = Field(default=AppMode.FULLSTACK, description="Generation mode")

    @model_validator(mode="before")
    @classmethod
    def _normalise_mode(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        try:
            mode = AppMode(data.get("mode", AppMode.FULLSTACK))
        except ValueError:
            # Left for field validation to report.
            return data
        if mode is AppMode.FRONTEND:
            data = {**data, "database": Database.NONE, "auth": False}
        elif mode is AppMode.BACKEND_ONLY:
            data = {**data, "pages": (), "features": ()}
        return data

    @property
    def slug(self) -> str:
        """Kebab-case package name, e.g. ``'Blog Platform'`` -> ``'blog-platform'``."""
        return slugify(self.name) or "app"

    @property
    def has_backend(self) -> bool:
        return self.database is not Database.NONE


# ---------------------------------------------------------------------------
# Backend generation
# ---------------------------------------------------------------------------

class BackendProject(BaseModel):
    """Input of the backend generator."""
    name: str = Field(..., description="Package name of the server")
    framework: BackendFramework = Field(
        default=BackendFramework.EXPRESS, description="Requested server framework"
    )
    database: Database = Field(..., description="Database the server connects to")
    tables: list[DatabaseTable] = Field(default_factory=list, description="Tables to model")
    endpoints: list[APIEndpoint] = Field(default_factory=list, description="Endpoints to route")
    authentication: bool = Field(default=False, description="Whether auth middleware is emitted")
    port: int = Field(default=3000, ge=1, le=65535, description="Listening port")

    @field_validator("database")
    @classmethod
    def _requires_database(cls, value: Database) -> Database:
        if value is Database.NONE:
            raise ValueError("A backend project needs a database")
        return value


class BackendResult(BaseModel):
    """Output of the backend generator."""
    files: dict[str, str] = Field(default_factory=dict, description="path -> content")
    dependencies: list[str] = Field(default_factory=list, description="Runtime packages")
    dev_dependencies: list[str] = Field(default_factory=list, description="Development packages")
    scripts: dict[str, str] = Field(default_factory=dict, description="npm scripts")
    framework: BackendFramework = Field(
        default=BackendFramework.EXPRESS, description="Framework actually generated"
    )
    requested_framework: BackendFramework = Field(
        default=BackendFramework.EXPRESS, description="Framework the caller asked for"
    )

    @property
    def delegated(self) -> bool:
        return self.framework is not self.requested_framework


# ---------------------------------------------------------------------------
# Generated bundle
# ---------------------------------------------------------------------------

class AppConfigFiles(BaseModel):
    """Packaging artefacts placed at the project root."""
    package_manifest: str = Field(..., description="package.json content")
    env_example: str = Field(..., description=".env.example content")
    readme: str = Field(..., description="README.md content")
    dockerfile: Optional[str] = Field(default=None, description="Dockerfile, when a server exists")
    ts_config: str = Field(default="", description="tsconfig.json content")


class GeneratedApp(BaseModel):
    """Everything generated for one ``AppSpec``."""
    frontend: dict[str, str] = Field(default_factory=dict, description="Frontend files")
    backend: dict[str, str] = Field(default_factory=dict, description="Backend files")
    config: AppConfigFiles = Field(..., description="Root packaging files")
    deployment: dict[str, dict[str, str]] = Field(
        default_factory=dict, description="provider -> (path -> content)"
    )

    @property
    def file_count(self) -> int:
        root = sum(
            1
            for value in (
                self.config.package_manifest,
                self.config.env_example,
                self.config.readme,
                self.config.dockerfile,
                self.config.ts_config,
            )
            if value
        )
        deployment = sum(len(files) for files in self.deployment.values())
        return len(self.frontend) + len(self.backend) + root + deployment

    def summary(self) -> dict[str, str]:
        """Return a label -> value mapping suitable for a summary table."""
        return {
            "Frontend files": str(len(self.frontend)),
            "Backend files": str(len(self.backend)),
            "Dockerfile": "yes" if self.config.dockerfile else "no",
            "Deployment": ", ".join(sorted(self.deployment)) or "none",
            "Total files": str(self.file_count),
        }


# ---------------------------------------------------------------------------
# Schema inference input
# ---------------------------------------------------------------------------

class CorpusEntry(BaseModel):
    """One historical project whose source is scanned for entities."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Project name")
    source_text: str = Field(default="", alias="sourceText", description="Project source code")
