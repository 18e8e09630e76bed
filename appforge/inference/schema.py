"""Heuristic schema inference from previous projects.

Scans the source text of a user's recent projects for common domain entities
(users, posts, products, orders, categories, comments) and proposes a
provisional ``DatabaseTable`` for each hit.  This is keyword matching, not
static analysis: the output is a suggestion, and the same table name may be
proposed once per scanned project (duplicates are not merged).

Corpus retrieval is the only blocking step and lives behind the
``CorpusSource`` protocol.  When retrieval fails the inferrer degrades to an
empty table list instead of raising.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx

from appforge.models import ColumnType, CorpusEntry, DatabaseColumn, DatabaseTable
from appforge.utils import print_warning


class CorpusUnavailableError(Exception):
    """Raised by a corpus source when the historical projects cannot be read."""


# ---------------------------------------------------------------------------
# Entity patterns
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EntityPattern:
    """A keyword rule mapping matches in source text to a canonical table."""

    regex: re.Pattern[str]
    table: str
    fields: tuple[str, ...]


ENTITY_PATTERNS: tuple[EntityPattern, ...] = (
    EntityPattern(re.compile(r"\b(users?|accounts?)\b", re.IGNORECASE), "users", ("email", "name", "role")),
    EntityPattern(re.compile(r"\b(posts?|articles?|blogs?)\b", re.IGNORECASE), "posts", ("title", "content", "user_id")),
    EntityPattern(re.compile(r"\b(products?|items?)\b", re.IGNORECASE), "products", ("name", "description", "price", "image")),
    EntityPattern(re.compile(r"\b(orders?|purchases?)\b", re.IGNORECASE), "orders", ("user_id", "total", "status")),
    EntityPattern(re.compile(r"\b(categories?|tags?)\b", re.IGNORECASE), "categories", ("name", "slug")),
    EntityPattern(re.compile(r"\b(comments?|reviews?)\b", re.IGNORECASE), "comments", ("content", "user_id", "post_id")),
)

_FOREIGN_KEY = re.compile(r"_id$")


def _infer_column_type(field: str) -> ColumnType:
    """Guess a semantic type from a field name."""
    if "id" in field:
        return ColumnType.UUID
    if field in ("price", "total"):
        return ColumnType.DECIMAL
    if field == "content":
        return ColumnType.TEXT
    return ColumnType.STRING


def _table_from_pattern(pattern: EntityPattern) -> DatabaseTable:
    columns = [DatabaseColumn(name="id", type=ColumnType.UUID, primary=True)]
    for field in pattern.fields:
        columns.append(
            DatabaseColumn(
                name=field,
                type=_infer_column_type(field),
                nullable=not _FOREIGN_KEY.search(field),
            )
        )
    columns.append(DatabaseColumn(name="created_at", type=ColumnType.TIMESTAMP))
    return DatabaseTable(id=pattern.table, name=pattern.table, columns=columns)


def default_users_table() -> DatabaseTable:
    """The canonical ``users`` table guaranteed to every inferred schema."""
    return DatabaseTable(
        id="users",
        name="users",
        columns=[
            DatabaseColumn(name="id", type=ColumnType.UUID, primary=True),
            DatabaseColumn(name="email", type=ColumnType.STRING, unique=True, nullable=False),
            DatabaseColumn(name="password", type=ColumnType.STRING, nullable=False),
            DatabaseColumn(name="name", type=ColumnType.STRING),
            DatabaseColumn(name="created_at", type=ColumnType.TIMESTAMP),
            DatabaseColumn(name="updated_at", type=ColumnType.TIMESTAMP),
        ],
    )


def extract_entities(source_text: str) -> list[DatabaseTable]:
    """Return one table per entity pattern that matches *source_text*.

    Each pattern fires at most once, in pattern order.
    """
    return [
        _table_from_pattern(pattern)
        for pattern in ENTITY_PATTERNS
        if pattern.regex.search(source_text)
    ]


def infer_tables(corpus: list[CorpusEntry]) -> list[DatabaseTable]:
    """Infer provisional tables from a corpus of previous projects.

    Entries are scanned in order and their tables concatenated without
    de-duplication.  A canonical ``users`` table is prepended when no
    scanned entry produced one.

    Args:
        corpus: Previous projects, typically most-recently-updated first.

    Returns:
        The proposed tables; never empty.
    """
    tables: list[DatabaseTable] = []
    for entry in corpus:
        if entry.source_text:
            tables.extend(extract_entities(entry.source_text))

    if not any(t.name == "users" for t in tables):
        tables.insert(0, default_users_table())
    return tables


# ---------------------------------------------------------------------------
# Corpus sources
# ---------------------------------------------------------------------------


class CorpusSource(Protocol):
    """Anything that can return a user's recent projects."""

    async def fetch_recent(self, limit: int) -> list[CorpusEntry]:
        ...


class StaticCorpus:
    """In-memory corpus, mostly useful for callers that already hold the data."""

    def __init__(self, entries: list[CorpusEntry]) -> None:
        self.entries = list(entries)

    async def fetch_recent(self, limit: int) -> list[CorpusEntry]:
        return self.entries[:limit]


class DirectoryCorpus:
    """Reads previous projects from files in a local directory.

    Each regular file is one project (its stem is the project name); the most
    recently modified files come first.
    """

    def __init__(self, directory: str | Path, pattern: str = "*") -> None:
        self.directory = Path(directory)
        self.pattern = pattern

    def _read(self, limit: int) -> list[CorpusEntry]:
        if not self.directory.is_dir():
            raise CorpusUnavailableError(f"Corpus directory not found: {self.directory}")
        files = [p for p in self.directory.glob(self.pattern) if p.is_file()]
        files.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        return [
            CorpusEntry(name=p.stem, source_text=p.read_text(encoding="utf-8", errors="replace"))
            for p in files[:limit]
        ]

    async def fetch_recent(self, limit: int) -> list[CorpusEntry]:
        return await asyncio.to_thread(self._read, limit)


class SupabaseCorpus:
    """Reads the ``projects`` table of a hosted Supabase project via PostgREST.

    Records are scoped to one user and ordered by ``updated_at`` descending.
    A missing user id means the caller is unauthenticated, which is reported
    as an unavailable corpus.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        user_id: str,
        access_token: str = "",
        timeout: float = 10.0,
    ) -> None:
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.user_id = user_id
        self.access_token = access_token or api_key
        self.timeout = timeout

    async def fetch_recent(self, limit: int) -> list[CorpusEntry]:
        if not self.url or not self.user_id:
            raise CorpusUnavailableError("No authenticated user for the project store")

        params = {
            "select": "code,name",
            "user_id": f"eq.{self.user_id}",
            "order": "updated_at.desc",
            "limit": str(limit),
        }
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.url, timeout=httpx.Timeout(self.timeout, connect=5.0)
            ) as client:
                response = await client.get("/rest/v1/projects", params=params, headers=headers)
                response.raise_for_status()
                rows = response.json()
        except httpx.HTTPError as exc:
            raise CorpusUnavailableError(f"Project store request failed: {exc}") from exc
        except ValueError as exc:
            raise CorpusUnavailableError(f"Project store returned invalid JSON: {exc}") from exc

        if not isinstance(rows, list):
            raise CorpusUnavailableError(
                f"Project store returned {type(rows).__name__}, expected a list of projects"
            )

        return [
            CorpusEntry(name=row.get("name") or "untitled", source_text=row.get("code") or "")
            for row in rows
            if isinstance(row, dict)
        ]


# ---------------------------------------------------------------------------
# Inferrer
# ---------------------------------------------------------------------------


class SchemaInferrer:
    """Reads a corpus and turns it into provisional tables.

    Retrieval failures (unavailable store, unauthenticated caller, timeout)
    degrade to an empty list; downstream generation still works because the
    backend generator seeds its own ``users`` table.
    """

    def __init__(self, source: CorpusSource, limit: int = 5, timeout: float = 10.0) -> None:
        self.source = source
        self.limit = limit
        self.timeout = timeout

    async def analyze(self) -> list[DatabaseTable]:
        try:
            corpus = await asyncio.wait_for(
                self.source.fetch_recent(self.limit), timeout=self.timeout
            )
        except (CorpusUnavailableError, asyncio.TimeoutError, OSError) as exc:
            print_warning(f"Schema inference skipped: {exc or type(exc).__name__}")
            return []
        return infer_tables(corpus[: self.limit])
