"""Unit tests for appforge.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from appforge.config import Config, CorpusConfig, LLMConfig, ServerConfig
from appforge.models import BackendFramework

pytestmark = pytest.mark.unit


class TestDefaults:
    def test_server_defaults(self):
        server = ServerConfig()
        assert server.port == 3000
        assert server.frontend_port == 5173
        assert server.framework is BackendFramework.EXPRESS

    def test_llm_defaults(self):
        llm = LLMConfig()
        assert llm.model == "gpt-4o-mini"
        assert llm.api_key == ""

    def test_corpus_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            CorpusConfig(limit=0)

    def test_archive_path(self):
        config = Config(output_dir=Path("/tmp/out"))
        assert config.archive_path("blog-platform") == Path("/tmp/out/blog-platform.zip")


class TestSerialisation:
    def test_save_redacts_secrets(self, tmp_path):
        config = Config(
            llm=LLMConfig(api_key="sk-secret"),
            corpus=CorpusConfig(supabase_key="service-key", user_id="u1"),
        )
        path = config.save(tmp_path / "nested" / "config.json")
        text = path.read_text(encoding="utf-8")
        assert "sk-secret" not in text
        assert "service-key" not in text

        loaded = Config.load(path)
        assert loaded.corpus.user_id == "u1"
        assert loaded.llm.api_key == ""
        # The in-memory instance keeps its key.
        assert config.llm.api_key == "sk-secret"


class TestFromEnv:
    def test_reads_variables(self, monkeypatch):
        monkeypatch.setenv("APPFORGE_OUTPUT_DIR", "/srv/out")
        monkeypatch.setenv("APPFORGE_SERVER_PORT", "4000")
        monkeypatch.setenv("APPFORGE_FRAMEWORK", "fastify")
        monkeypatch.setenv("APPFORGE_LLM_MODEL", "local-model")
        monkeypatch.setenv("APPFORGE_CORPUS_LIMIT", "3")

        config = Config.from_env()
        assert config.output_dir == Path("/srv/out")
        assert config.server.port == 4000
        assert config.server.framework is BackendFramework.FASTIFY
        assert config.llm.model == "local-model"
        assert config.corpus.limit == 3

    def test_empty_environment_gives_defaults(self, monkeypatch):
        for name in ("APPFORGE_OUTPUT_DIR", "APPFORGE_SERVER_PORT", "APPFORGE_FRAMEWORK"):
            monkeypatch.delenv(name, raising=False)
        config = Config.from_env()
        assert config.server.port == 3000
        assert config.output_dir == Path("./output")
