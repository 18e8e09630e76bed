"""Shared pytest fixtures for the appforge test suite.

Provides reusable fixtures for:
- Catalog specs and hand-built ``AppSpec`` variants
- Backend projects and tables
- A shared template renderer and generator
- Mocked httpx clients for the completion API
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from appforge.config import Config
from appforge.models import (
    APIEndpoint,
    AppSpec,
    AppType,
    BackendProject,
    ColumnType,
    Database,
    DatabaseColumn,
    DatabaseIndex,
    DatabaseTable,
    DeploymentTarget,
    HTTPMethod,
    UiKit,
)
from appforge.scaffolder.generator import AppGenerator
from appforge.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Specs
# ---------------------------------------------------------------------------

@pytest.fixture
def blog_spec() -> AppSpec:
    """Blog without auth on PostgreSQL (three pages)."""
    return AppSpec(
        name="Blog Platform",
        type=AppType.BLOG,
        description="A simple blog",
        pages=("Home", "Blog", "Post Detail"),
        database=Database.POSTGRESQL,
        auth=False,
        deployment=DeploymentTarget.VERCEL,
    )


@pytest.fixture
def portfolio_spec() -> AppSpec:
    """Frontend-only portfolio."""
    return AppSpec(
        name="Portfolio Website",
        type=AppType.PORTFOLIO,
        pages=("Home", "About", "Projects"),
        database=Database.NONE,
        deployment=DeploymentTarget.NETLIFY,
    )


@pytest.fixture
def dashboard_spec() -> AppSpec:
    """Authenticated dashboard on the token-based UI kit."""
    return AppSpec(
        name="Admin Dashboard",
        type=AppType.DASHBOARD,
        description="Analytics dashboard",
        features=("Analytics", "Charts"),
        pages=("Dashboard", "Analytics", "Settings"),
        database=Database.POSTGRESQL,
        auth=True,
        ui=UiKit.SHADCN,
        deployment=DeploymentTarget.VERCEL,
    )


@pytest.fixture
def chat_spec() -> AppSpec:
    """Authenticated chat app on MongoDB whose page list includes Login."""
    return AppSpec(
        name="Chat Application",
        type=AppType.CHAT,
        pages=("Login", "Chat", "Settings"),
        database=Database.MONGODB,
        auth=True,
        deployment=DeploymentTarget.RAILWAY,
    )


# ---------------------------------------------------------------------------
# Backend inputs
# ---------------------------------------------------------------------------

@pytest.fixture
def posts_table() -> DatabaseTable:
    return DatabaseTable(
        id="posts",
        name="posts",
        columns=[
            DatabaseColumn(name="id", type=ColumnType.UUID, primary=True),
            DatabaseColumn(name="title", type=ColumnType.STRING, nullable=False),
            DatabaseColumn(name="body", type=ColumnType.TEXT, nullable=True),
            DatabaseColumn(name="published", type=ColumnType.BOOLEAN, default=False),
            DatabaseColumn(name="created_at", type=ColumnType.TIMESTAMP),
        ],
        indexes=[DatabaseIndex(name="title", columns=["title"], unique=True)],
    )


@pytest.fixture
def posts_endpoints() -> list[APIEndpoint]:
    return [
        APIEndpoint(id="posts-list", path="/api/posts", method=HTTPMethod.GET, name="List Posts"),
        APIEndpoint(
            id="posts-create",
            path="/api/posts",
            method=HTTPMethod.POST,
            name="Create Post",
            authentication=True,
        ),
        APIEndpoint(id="posts-detail", path="/api/posts/:id", method=HTTPMethod.GET, name="Get Post"),
    ]


@pytest.fixture
def sql_project(posts_table: DatabaseTable, posts_endpoints: list[APIEndpoint]) -> BackendProject:
    return BackendProject(
        name="blog-server",
        database=Database.POSTGRESQL,
        tables=[posts_table],
        endpoints=posts_endpoints,
        authentication=True,
    )


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def generator() -> AppGenerator:
    return AppGenerator(Config())


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """A Config whose output directory lives under tmp_path."""
    return Config(output_dir=tmp_path / "output")


# ---------------------------------------------------------------------------
# httpx mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_http_client():
    """Factory returning an ``AsyncMock`` usable as ``httpx.AsyncClient``.

    Pass either ``json_body`` for a successful response or ``side_effect``
    for a failing ``post``.
    """

    def _make(json_body: dict[str, Any] | None = None, side_effect: Exception | None = None):
        response = MagicMock()
        response.json.return_value = json_body or {}
        response.raise_for_status = MagicMock()

        client = AsyncMock()
        if side_effect is not None:
            client.post = AsyncMock(side_effect=side_effect)
        else:
            client.post = AsyncMock(return_value=response)
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=False)
        return client

    return _make


@pytest.fixture
def spec_json() -> str:
    """A model answer describing a recipe site."""
    return json.dumps(
        {
            "type": "blog",
            "name": "Recipe Share",
            "description": "Share recipes",
            "features": ["Recipes", "Comments"],
            "pages": ["Home", "Recipes"],
            "database": "sqlite",
            "auth": False,
            "ui": "tailwind",
            "deployment": "netlify",
            "mode": "fullstack",
        }
    )
