"""Backend file-map generation.

Builds a Node.js server for a ``BackendProject``: an Express entry point,
database connector, one model per table, one router per first path
segment, middleware and an environment template.  Express is the only
framework generated natively; every other ``BackendFramework`` is routed to
the Express strategy with a printed warning and recorded on the result.

Static files (entry point, connectors, middleware, env) are Jinja2
templates.  Model schemas and route handlers depend on every column and
endpoint, so they are assembled line by line here.

Also provides ``generate_migration`` (SQL DDL per table) and
``generate_api_docs`` (an OpenAPI 3.0 description of the endpoints).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Protocol

import yaml

from appforge.inference.schema import default_users_table
from appforge.models import (
    APIEndpoint,
    BackendFramework,
    BackendProject,
    BackendResult,
    ColumnType,
    Database,
    DatabaseColumn,
    DatabaseTable,
    HTTPMethod,
    RelationType,
)
from appforge.scaffolder.templates import TemplateRenderer
from appforge.utils import print_warning, snake_slugify


# ---------------------------------------------------------------------------
# Dependency tables
# ---------------------------------------------------------------------------

PACKAGE_VERSIONS: dict[str, str] = {
    "express": "^4.18.2",
    "cors": "^2.8.5",
    "dotenv": "^16.3.1",
    "bcryptjs": "^2.4.3",
    "jsonwebtoken": "^9.0.2",
    "express-validator": "^7.0.1",
    "helmet": "^7.1.0",
    "compression": "^1.7.4",
    "mongoose": "^8.0.3",
    "sequelize": "^6.35.2",
    "pg": "^8.11.3",
    "pg-hstore": "^2.3.4",
    "mysql2": "^3.6.5",
    "sqlite3": "^5.1.6",
    "nodemon": "^3.0.2",
    "jest": "^29.7.0",
    "supertest": "^6.3.3",
}

BASE_DEPENDENCIES = ("express", "cors", "dotenv", "bcryptjs", "jsonwebtoken")
MIDDLEWARE_DEPENDENCIES = ("express-validator", "helmet", "compression")
DEV_DEPENDENCIES = ("nodemon", "jest", "supertest")

# Sequelize dialect per relational database.
SQL_DIALECTS: dict[Database, str] = {
    Database.POSTGRESQL: "postgres",
    Database.SUPABASE: "postgres",
    Database.MYSQL: "mysql",
    Database.SQLITE: "sqlite",
}

SQL_DRIVERS: dict[str, tuple[str, ...]] = {
    "postgres": ("pg", "pg-hstore"),
    "mysql": ("mysql2",),
    "sqlite": ("sqlite3",),
}

_DB_PORTS = {"postgres": 5432, "mysql": 3306}
_DB_USERS = {"postgres": "postgres", "mysql": "root"}


def is_document_store(database: Database) -> bool:
    return database is Database.MONGODB


def sql_dialect(database: Database) -> str:
    """Return the relational dialect for *database*.

    ``postgresql`` and ``supabase`` map to ``postgres``; other relational
    databases use their own name.
    """
    return SQL_DIALECTS.get(database, database.value)


def backend_dependencies(database: Database) -> list[str]:
    """Runtime packages required by a generated server for *database*."""
    if is_document_store(database):
        store = ["mongoose"]
    else:
        store = ["sequelize", *SQL_DRIVERS.get(sql_dialect(database), ())]
    return [*BASE_DEPENDENCIES, *store, *MIDDLEWARE_DEPENDENCIES]


def pinned(packages: list[str] | tuple[str, ...]) -> dict[str, str]:
    """Attach version ranges to package names, in order."""
    return {name: PACKAGE_VERSIONS.get(name, "latest") for name in packages}


# ---------------------------------------------------------------------------
# Column type mappings
# ---------------------------------------------------------------------------

MONGOOSE_TYPES: dict[ColumnType, str] = {
    ColumnType.UUID: "String",
    ColumnType.STRING: "String",
    ColumnType.TEXT: "String",
    ColumnType.INTEGER: "Number",
    ColumnType.DECIMAL: "Number",
    ColumnType.BOOLEAN: "Boolean",
    ColumnType.TIMESTAMP: "Date",
    ColumnType.ARRAY: "[String]",
}

SEQUELIZE_TYPES: dict[ColumnType, str] = {
    ColumnType.UUID: "DataTypes.UUID",
    ColumnType.STRING: "DataTypes.STRING",
    ColumnType.TEXT: "DataTypes.TEXT",
    ColumnType.INTEGER: "DataTypes.INTEGER",
    ColumnType.DECIMAL: "DataTypes.DECIMAL(10, 2)",
    ColumnType.BOOLEAN: "DataTypes.BOOLEAN",
    ColumnType.TIMESTAMP: "DataTypes.DATE",
    ColumnType.ARRAY: "DataTypes.JSON",
}

# Maintained by the ORM's timestamp support rather than declared as fields.
TIMESTAMP_COLUMNS = frozenset({"created_at", "updated_at"})


def _js(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _mongoose_field(column: DatabaseColumn) -> str:
    options = [f"type: {MONGOOSE_TYPES[column.type]}"]
    if column.required:
        options.append("required: true")
    if column.unique:
        options.append("unique: true")
    if column.has_default:
        options.append(f"default: {_js(column.default)}")
    return f"  {column.name}: {{ {', '.join(options)} }},"


def _sequelize_field(column: DatabaseColumn, dialect: str) -> str:
    sql_type = SEQUELIZE_TYPES[column.type]
    if column.type is ColumnType.ARRAY and dialect == "postgres":
        sql_type = "DataTypes.ARRAY(DataTypes.STRING)"
    options = [f"type: {sql_type}", f"allowNull: {'false' if column.required else 'true'}"]
    if column.primary:
        options.append("primaryKey: true")
    if column.unique:
        options.append("unique: true")
    if column.auto_increment:
        options.append("autoIncrement: true")
    if column.has_default:
        options.append(f"defaultValue: {_js(column.default)}")
    elif column.primary and column.type is ColumnType.UUID:
        options.append("defaultValue: DataTypes.UUIDV4")
    return f"  {column.name}: {{ {', '.join(options)} }},"


def mongoose_model(table: DatabaseTable) -> str:
    """Render a mongoose schema module for *table*.

    An ``id`` primary key is left to MongoDB's own ``_id``.
    """
    schema_var = f"{table.name}Schema"
    fields = [
        _mongoose_field(column)
        for column in table.columns
        if not (column.primary and column.name == "id")
        and column.name not in TIMESTAMP_COLUMNS
    ]
    lines = [
        "const mongoose = require('mongoose');",
        "",
        f"const {schema_var} = new mongoose.Schema(",
        "  {",
        *("  " + field for field in fields),
        "  },",
        "  {",
        "    timestamps: { createdAt: 'created_at', updatedAt: 'updated_at' },",
        "    toJSON: { virtuals: true },",
        "    toObject: { virtuals: true },",
        "  }",
        ");",
        "",
    ]
    for index in table.indexes:
        keys = ", ".join(f"{name}: 1" for name in index.columns)
        options = f", {{ name: '{index.name}', unique: true }}" if index.unique else f", {{ name: '{index.name}' }}"
        lines.append(f"{schema_var}.index({{ {keys} }}{options});")
    if table.indexes:
        lines.append("")
    lines.append(f"module.exports = mongoose.model('{table.model_name}', {schema_var});")
    return "\n".join(lines) + "\n"


def sequelize_model(table: DatabaseTable, dialect: str) -> str:
    """Render a Sequelize model module for *table*."""
    model = table.model_name
    fields = [
        _sequelize_field(column, dialect)
        for column in table.columns
        if column.name not in TIMESTAMP_COLUMNS
    ]
    lines = [
        "const { DataTypes } = require('sequelize');",
        "const { sequelize } = require('../config/database');",
        "",
        f"const {model} = sequelize.define(",
        f"  '{table.name}',",
        "  {",
        *("  " + field for field in fields),
        "  },",
        "  {",
        f"    tableName: '{table.name}',",
        "    timestamps: true,",
        "    underscored: true,",
        "    indexes: [",
    ]
    for index in table.indexes:
        columns = ", ".join(f"'{name}'" for name in index.columns)
        unique = ", unique: true" if index.unique else ""
        lines.append(f"      {{ name: 'idx_{table.name}_{index.name}', fields: [{columns}]{unique} }},")
    lines += [
        "    ],",
        "  }",
        ");",
        "",
        f"module.exports = {model};",
    ]
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------

AUTH_RESOURCE = "auth"


@dataclass(frozen=True)
class _Orm:
    """Query snippets for one persistence style."""

    find_by_id: str
    find_all: str
    find_by_email: str
    update: str
    delete: str


_SEQUELIZE = _Orm(
    find_by_id="{model}.findByPk(req.params.id)",
    find_all="{model}.findAll()",
    find_by_email="{model}.findOne({{ where: {{ email }} }})",
    update="await item.update(req.body);",
    delete="await item.destroy();",
)

_MONGOOSE = _Orm(
    find_by_id="{model}.findById(req.params.id)",
    find_all="{model}.find()",
    find_by_email="{model}.findOne({{ email }})",
    update="item.set(req.body);\n    await item.save();",
    delete="await item.deleteOne();",
)

_NOT_FOUND = "if (!item) {\n      return res.status(404).json({ error: 'Not found' });\n    }"


def _crud_body(endpoint: APIEndpoint, model: str, orm: _Orm) -> str:
    find_one = f"const item = await {orm.find_by_id.format(model=model)};\n    {_NOT_FOUND}"
    method = endpoint.method
    if method is HTTPMethod.GET and endpoint.has_id_param:
        return f"{find_one}\n    res.json(item);"
    if method is HTTPMethod.GET:
        return f"const items = await {orm.find_all.format(model=model)};\n    res.json(items);"
    if method is HTTPMethod.POST:
        return f"const item = await {model}.create(req.body);\n    res.status(201).json(item);"
    if method in (HTTPMethod.PUT, HTTPMethod.PATCH):
        return f"{find_one}\n    {orm.update}\n    res.json(item);"
    return f"{find_one}\n    {orm.delete}\n    res.status(204).send();"


def _auth_body(action: str, model: str, orm: _Orm) -> str | None:
    by_email = orm.find_by_email.format(model=model)
    if action == "register":
        return (
            "const { name, email, password } = req.body;\n"
            f"    if (await {by_email}) {{\n"
            "      return res.status(409).json({ error: 'Email already registered' });\n"
            "    }\n"
            "    const hashed = await bcrypt.hash(password, 10);\n"
            f"    const user = await {model}.create({{ name, email, password: hashed }});\n"
            "    res.status(201).json({ token: signToken(user), user: publicUser(user) });"
        )
    if action == "login":
        return (
            "const { email, password } = req.body;\n"
            f"    const user = await {by_email};\n"
            "    if (!user || !(await bcrypt.compare(password, user.password))) {\n"
            "      return res.status(401).json({ error: 'Invalid credentials' });\n"
            "    }\n"
            "    res.json({ token: signToken(user), user: publicUser(user) });"
        )
    if action == "me":
        find_user = orm.find_by_id.format(model=model).replace("req.params.id", "req.user.id")
        return (
            "if (!req.user) {\n"
            "      return res.status(401).json({ error: 'Unauthorized' });\n"
            "    }\n"
            f"    const user = await {find_user};\n"
            "    if (!user) {\n"
            "      return res.status(404).json({ error: 'Not found' });\n"
            "    }\n"
            "    res.json(publicUser(user));"
        )
    if action == "logout":
        return "res.json({ message: 'Logged out' });"
    return None


_AUTH_HELPERS = """const signToken = (user) =>
  jwt.sign({ id: user.id, role: user.role }, process.env.JWT_SECRET, {
    expiresIn: process.env.JWT_EXPIRE || '7d',
  });

const publicUser = (user) => {
  const { password, ...rest } = user.toJSON();
  return rest;
};
"""

_NOT_IMPLEMENTED = "res.status(501).json({ error: 'Not implemented' });"


@dataclass(frozen=True)
class RouterSpec:
    """One generated router file and where it is mounted."""

    segment: str
    mount: str
    endpoints: tuple[APIEndpoint, ...]

    @property
    def variable(self) -> str:
        name = re.sub(r"[^0-9a-zA-Z]+", "_", self.segment).strip("_") or "root"
        return f"{name}Router"


def _resource_table(endpoint: APIEndpoint, tables: dict[str, DatabaseTable]) -> str | None:
    """Name of the table an endpoint operates on, if any.

    ``/api/posts/:id`` resolves through its second segment, ``/posts/:id`` through its
    first.
    """
    for candidate in (endpoint.resource, endpoint.first_segment):
        if candidate in tables:
            return candidate
    return None


def group_routers(endpoints: list[APIEndpoint]) -> list[RouterSpec]:
    """Group endpoints by their first path segment, in first-seen order."""
    groups: dict[str, list[APIEndpoint]] = {}
    for endpoint in endpoints:
        groups.setdefault(endpoint.first_segment, []).append(endpoint)
    return [
        RouterSpec(
            segment=segment,
            mount="/" + segment if group[0].segments else "/",
            endpoints=tuple(group),
        )
        for segment, group in groups.items()
    ]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class BackendStrategy(Protocol):
    """A server generator for one framework."""

    framework: BackendFramework

    def generate(self, project: BackendProject) -> BackendResult:
        ...


class ExpressStrategy:
    """Express + (mongoose | Sequelize) server generator."""

    framework = BackendFramework.EXPRESS

    def __init__(self, renderer: TemplateRenderer | None = None, *, cors_origin: str = "http://localhost:5173") -> None:
        self.renderer = renderer or TemplateRenderer()
        self.cors_origin = cors_origin

    # -- Public API --------------------------------------------------------

    def generate(self, project: BackendProject) -> BackendResult:
        tables = self._tables(project)
        routers = group_routers(project.endpoints)
        context = self._build_context(project, routers)

        files: dict[str, str] = {
            "index.js": self.renderer.render("backend/index.js.j2", context),
            "config/database.js": self.renderer.render(
                "backend/config/database.mongo.js.j2"
                if context["document_store"]
                else "backend/config/database.sql.js.j2",
                context,
            ),
        }

        for table in tables.values():
            files[f"models/{table.name}.js"] = (
                mongoose_model(table)
                if context["document_store"]
                else sequelize_model(table, context["dialect"])
            )

        for router in routers:
            files[f"routes/{router.segment}.js"] = self._router_file(project, router, tables)

        if project.authentication:
            files["middleware/auth.js"] = self.renderer.render("backend/middleware/auth.js.j2", context)
        files["middleware/errorHandler.js"] = self.renderer.render(
            "backend/middleware/errorHandler.js.j2", context
        )
        files[".env.example"] = self.renderer.render("backend/env.example.j2", context)

        dependencies = backend_dependencies(project.database)
        scripts = {"start": "node index.js", "dev": "nodemon index.js", "test": "jest"}
        files["package.json"] = json.dumps(
            {
                "name": project.name,
                "version": "1.0.0",
                "private": True,
                "main": "index.js",
                "scripts": scripts,
                "dependencies": pinned(dependencies),
                "devDependencies": pinned(DEV_DEPENDENCIES),
            },
            indent=2,
        ) + "\n"

        return BackendResult(
            files=files,
            dependencies=dependencies,
            dev_dependencies=list(DEV_DEPENDENCIES),
            scripts=scripts,
            framework=self.framework,
            requested_framework=project.framework,
        )

    # -- Internals ---------------------------------------------------------

    def _build_context(self, project: BackendProject, routers: list[RouterSpec]) -> dict[str, Any]:
        dialect = sql_dialect(project.database)
        return {
            "project_name": project.name,
            "port": project.port,
            "authentication": project.authentication,
            "document_store": is_document_store(project.database),
            "dialect": dialect,
            "db_name": snake_slugify(project.name) or "app",
            "db_port": _DB_PORTS.get(dialect, 5432),
            "db_user": _DB_USERS.get(dialect, "root"),
            "cors_origin": self.cors_origin,
            "routers": routers,
        }

    @staticmethod
    def _tables(project: BackendProject) -> dict[str, DatabaseTable]:
        """Index tables by name; seed ``users`` and keep the first duplicate."""
        tables: dict[str, DatabaseTable] = {}
        for table in project.tables:
            if table.name in tables:
                print_warning(f"Duplicate table '{table.name}' ignored; keeping the first definition")
                continue
            tables[table.name] = table
        if "users" not in tables:
            tables = {"users": default_users_table(), **tables}
        return tables

    def _router_file(
        self,
        project: BackendProject,
        router: RouterSpec,
        tables: dict[str, DatabaseTable],
    ) -> str:
        orm = _MONGOOSE if is_document_store(project.database) else _SEQUELIZE
        handlers: list[str] = []
        models: list[str] = []
        needs_auth_helpers = False
        uses_middleware = False

        for endpoint in router.endpoints:
            body: str | None = None
            if endpoint.resource == AUTH_RESOURCE and len(endpoint.segments) > 2:
                body = _auth_body(endpoint.segments[2], tables["users"].model_name, orm)
                if body is not None:
                    needs_auth_helpers = True
                    models.append("users")
            table_name = _resource_table(endpoint, tables)
            if body is None and table_name is not None:
                body = _crud_body(endpoint, tables[table_name].model_name, orm)
                models.append(table_name)
            if body is None:
                body = _NOT_IMPLEMENTED

            guard = ""
            if endpoint.authentication:
                if project.authentication:
                    guard = "authMiddleware, "
                    uses_middleware = True
                else:
                    print_warning(
                        f"{endpoint.method.value} {endpoint.path} requires authentication "
                        "but the project has none; serving it unguarded"
                    )

            handlers.append(
                f"// {endpoint.description or endpoint.name}\n"
                f"router.{endpoint.method.value.lower()}('{endpoint.router_path}', {guard}async (req, res, next) => {{\n"
                f"  try {{\n"
                f"    {body}\n"
                f"  }} catch (error) {{\n"
                f"    next(error);\n"
                f"  }}\n"
                f"}});\n"
            )

        lines = ["const express = require('express');"]
        if needs_auth_helpers:
            lines += ["const bcrypt = require('bcryptjs');", "const jwt = require('jsonwebtoken');"]
        for name in dict.fromkeys(models):
            lines.append(f"const {tables[name].model_name} = require('../models/{name}');")
        if uses_middleware:
            lines.append("const authMiddleware = require('../middleware/auth');")
        lines += ["", "const router = express.Router();", ""]
        if needs_auth_helpers:
            lines += [_AUTH_HELPERS]
        lines += handlers
        lines.append("module.exports = router;")
        return "\n".join(lines) + "\n"


STRATEGIES: dict[BackendFramework, BackendStrategy] = {
    BackendFramework.EXPRESS: ExpressStrategy(),
}


def generate_backend(
    project: BackendProject,
    strategies: dict[BackendFramework, BackendStrategy] | None = None,
) -> BackendResult:
    """Generate the server for *project*.

    Frameworks without a native strategy are generated as Express; the
    substitution is printed and ``BackendResult.requested_framework`` keeps
    the original request, so ``result.delegated`` is true.
    """
    registry = STRATEGIES if strategies is None else strategies
    strategy = registry.get(project.framework)
    if strategy is None:
        fallback = registry[BackendFramework.EXPRESS]
        print_warning(
            f"No native {project.framework.value} generator; "
            f"generating a {fallback.framework.value} server instead"
        )
        strategy = fallback
    result = strategy.generate(project)
    return result.model_copy(update={"requested_framework": project.framework})


# ---------------------------------------------------------------------------
# Migrations
# ---------------------------------------------------------------------------

SQL_TYPES: dict[str, dict[ColumnType, str]] = {
    "postgres": {
        ColumnType.UUID: "UUID",
        ColumnType.STRING: "VARCHAR(255)",
        ColumnType.TEXT: "TEXT",
        ColumnType.INTEGER: "INTEGER",
        ColumnType.DECIMAL: "DECIMAL(10, 2)",
        ColumnType.BOOLEAN: "BOOLEAN",
        ColumnType.TIMESTAMP: "TIMESTAMP",
        ColumnType.ARRAY: "TEXT[]",
    },
    "mysql": {
        ColumnType.UUID: "CHAR(36)",
        ColumnType.STRING: "VARCHAR(255)",
        ColumnType.TEXT: "TEXT",
        ColumnType.INTEGER: "INT",
        ColumnType.DECIMAL: "DECIMAL(10, 2)",
        ColumnType.BOOLEAN: "BOOLEAN",
        ColumnType.TIMESTAMP: "DATETIME",
        ColumnType.ARRAY: "JSON",
    },
    "sqlite": {
        ColumnType.UUID: "TEXT",
        ColumnType.STRING: "TEXT",
        ColumnType.TEXT: "TEXT",
        ColumnType.INTEGER: "INTEGER",
        ColumnType.DECIMAL: "REAL",
        ColumnType.BOOLEAN: "INTEGER",
        ColumnType.TIMESTAMP: "DATETIME",
        ColumnType.ARRAY: "TEXT",
    },
}


def sql_literal(value: Any, dialect: str) -> str:
    """Render *value* as a SQL literal."""
    if isinstance(value, bool):
        if dialect == "sqlite":
            return "1" if value else "0"
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    text = value if isinstance(value, str) else json.dumps(value)
    return "'" + text.replace("'", "''") + "'"


def _column_ddl(column: DatabaseColumn, dialect: str) -> str:
    sql_type = SQL_TYPES[dialect][column.type]
    if column.auto_increment and dialect == "postgres":
        sql_type = "SERIAL"
    parts = [column.name, sql_type]
    if column.primary:
        parts.append("PRIMARY KEY")
        if column.auto_increment and dialect == "sqlite":
            parts.append("AUTOINCREMENT")
    if column.auto_increment and dialect == "mysql":
        parts.append("AUTO_INCREMENT")
    if column.required:
        parts.append("NOT NULL")
    if column.unique and not column.primary:
        parts.append("UNIQUE")
    if column.has_default:
        parts.append(f"DEFAULT {sql_literal(column.default, dialect)}")
    return " ".join(parts)


def generate_migration(table: DatabaseTable, database: Database) -> str:
    """Return a ``CREATE TABLE`` migration for *table* on *database*.

    Document stores get a comment placeholder; ``none`` yields an empty
    string.
    """
    if database is Database.NONE:
        return ""
    if is_document_store(database):
        return (
            f"// MongoDB collection: {table.name}\n"
            "// Schema validation is defined in the model file\n"
        )

    dialect = sql_dialect(database)
    definitions = [_column_ddl(column, dialect) for column in table.columns]
    for relation in table.relations:
        if relation.type is RelationType.BELONGS_TO:
            definitions.append(
                f"FOREIGN KEY ({relation.foreign_key}) "
                f"REFERENCES {relation.table}({relation.local_key or 'id'})"
            )

    lines = [f"CREATE TABLE IF NOT EXISTS {table.name} ("]
    lines.append(",\n".join(f"  {definition}" for definition in definitions))
    lines.append(");")
    if table.indexes:
        lines.append("")
    for index in table.indexes:
        unique = "UNIQUE " if index.unique else ""
        lines.append(
            f"CREATE {unique}INDEX idx_{table.name}_{index.name} "
            f"ON {table.name} ({', '.join(index.columns)});"
        )
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# API documentation
# ---------------------------------------------------------------------------

_PATH_PARAM = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def openapi_path(path: str) -> str:
    """Convert an Express path (``/posts/:id``) to OpenAPI form (``/posts/{id}``)."""
    return _PATH_PARAM.sub(r"{\1}", path)


def _operation(endpoint: APIEndpoint) -> dict[str, Any]:
    operation: dict[str, Any] = {"operationId": endpoint.id, "summary": endpoint.name}
    if endpoint.description:
        operation["description"] = endpoint.description

    params = _PATH_PARAM.findall(endpoint.path)
    if params:
        operation["parameters"] = [
            {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
            for name in params
        ]

    if endpoint.request_schema is not None or endpoint.method in (
        HTTPMethod.POST,
        HTTPMethod.PUT,
        HTTPMethod.PATCH,
    ):
        operation["requestBody"] = {
            "content": {
                "application/json": {"schema": endpoint.request_schema or {"type": "object"}}
            }
        }

    operation["responses"] = {
        "200": {
            "description": "Success",
            "content": {
                "application/json": {"schema": endpoint.response_schema or {"type": "object"}}
            },
        }
    }
    if endpoint.authentication:
        operation["security"] = [{"bearerAuth": []}]
        operation["responses"]["401"] = {"description": "Unauthorized"}
    return operation


def generate_api_docs(
    endpoints: list[APIEndpoint],
    title: str = "API Documentation",
    version: str = "1.0.0",
) -> dict[str, Any]:
    """Describe *endpoints* as an OpenAPI 3.0 document.

    Endpoints sharing a path are merged under one path item, keyed by
    lower-case method.
    """
    paths: dict[str, dict[str, Any]] = {}
    for endpoint in endpoints:
        item = paths.setdefault(openapi_path(endpoint.path), {})
        item[endpoint.method.value.lower()] = _operation(endpoint)

    doc: dict[str, Any] = {
        "openapi": "3.0.0",
        "info": {"title": title, "version": version},
        "paths": paths,
    }
    if any(endpoint.authentication for endpoint in endpoints):
        doc["components"] = {
            "securitySchemes": {
                "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
            }
        }
    return doc


def api_docs_to_yaml(doc: dict[str, Any]) -> str:
    """Serialise an OpenAPI document to YAML, preserving key order."""
    return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)
