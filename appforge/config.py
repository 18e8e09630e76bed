"""appforge configuration.

Centralised, typed configuration for the generator, the LLM spec inferrer and
the historical-corpus reader.  All settings use Pydantic v2 models so they
can be validated at construction time and serialised to/from JSON or
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from appforge.models import BackendFramework


class ServerConfig(BaseModel):
    """Settings baked into the generated server and frontend."""

    port: int = Field(default=3000, ge=1, le=65535, description="Generated server port")
    frontend_port: int = Field(default=5173, ge=1, le=65535, description="Vite dev server port")
    cors_origin: str = Field(default="http://localhost:5173")
    framework: BackendFramework = Field(
        default=BackendFramework.EXPRESS,
        description="Server framework requested for generated backends",
    )


class LLMConfig(BaseModel):
    """Configuration for the OpenAI-compatible completion API used to infer specs."""

    url: str = Field(default="https://api.openai.com/v1")
    model: str = Field(default="gpt-4o-mini")
    api_key: str = Field(default="", description="Bearer token, never persisted by save()")
    timeout: int = Field(default=60, ge=5, description="Per-request timeout in seconds")


class CorpusConfig(BaseModel):
    """Where schema inference reads previous projects from."""

    limit: int = Field(default=5, ge=1, description="Most-recently-updated records to scan")
    timeout: float = Field(default=10.0, gt=0, description="Read timeout in seconds")
    supabase_url: str = Field(default="")
    supabase_key: str = Field(default="")
    user_id: str = Field(default="", description="Tenant the corpus is scoped to")


class Config(BaseModel):
    """Global appforge configuration.

    Instances are typically created once by ``Pipeline`` or by the CLI entry
    point and then passed through the rest of the system.
    """

    output_dir: Path = Field(default=Path("./output"))
    archive_name: str = Field(default="{slug}.zip", description="Archive filename template")
    server: ServerConfig = Field(default_factory=ServerConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    corpus: CorpusConfig = Field(default_factory=CorpusConfig)

    def archive_path(self, slug: str) -> Path:
        """Return the default archive location for a project slug."""
        return self.output_dir / self.archive_name.format(slug=slug)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Secrets (the LLM API key and the Supabase key) are blanked.

        Args:
            path: Destination file.

        Returns:
            The path where the file was written.
        """
        redacted = self.model_copy(
            update={
                "llm": self.llm.model_copy(update={"api_key": ""}),
                "corpus": self.corpus.model_copy(update={"supabase_key": ""}),
            }
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(redacted.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            APPFORGE_OUTPUT_DIR, APPFORGE_SERVER_PORT, APPFORGE_FRAMEWORK,
            APPFORGE_CORS_ORIGIN, APPFORGE_LLM_URL, APPFORGE_LLM_MODEL,
            APPFORGE_LLM_API_KEY, APPFORGE_LLM_TIMEOUT, APPFORGE_CORPUS_LIMIT,
            APPFORGE_SUPABASE_URL, APPFORGE_SUPABASE_KEY, APPFORGE_USER_ID.
        """
        server_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_SERVER_PORT"):
            server_kwargs["port"] = int(os.environ["APPFORGE_SERVER_PORT"])
        if os.environ.get("APPFORGE_FRAMEWORK"):
            server_kwargs["framework"] = BackendFramework(os.environ["APPFORGE_FRAMEWORK"])
        if os.environ.get("APPFORGE_CORS_ORIGIN"):
            server_kwargs["cors_origin"] = os.environ["APPFORGE_CORS_ORIGIN"]

        llm_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_LLM_URL"):
            llm_kwargs["url"] = os.environ["APPFORGE_LLM_URL"]
        if os.environ.get("APPFORGE_LLM_MODEL"):
            llm_kwargs["model"] = os.environ["APPFORGE_LLM_MODEL"]
        if os.environ.get("APPFORGE_LLM_API_KEY"):
            llm_kwargs["api_key"] = os.environ["APPFORGE_LLM_API_KEY"]
        if os.environ.get("APPFORGE_LLM_TIMEOUT"):
            llm_kwargs["timeout"] = int(os.environ["APPFORGE_LLM_TIMEOUT"])

        corpus_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_CORPUS_LIMIT"):
            corpus_kwargs["limit"] = int(os.environ["APPFORGE_CORPUS_LIMIT"])
        if os.environ.get("APPFORGE_SUPABASE_URL"):
            corpus_kwargs["supabase_url"] = os.environ["APPFORGE_SUPABASE_URL"]
        if os.environ.get("APPFORGE_SUPABASE_KEY"):
            corpus_kwargs["supabase_key"] = os.environ["APPFORGE_SUPABASE_KEY"]
        if os.environ.get("APPFORGE_USER_ID"):
            corpus_kwargs["user_id"] = os.environ["APPFORGE_USER_ID"]

        return cls(
            output_dir=Path(os.environ.get("APPFORGE_OUTPUT_DIR", "./output")),
            server=ServerConfig(**server_kwargs),
            llm=LLMConfig(**llm_kwargs),
            corpus=CorpusConfig(**corpus_kwargs),
        )
