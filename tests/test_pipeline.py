"""Unit tests for the pipeline orchestrator and CLI (appforge.pipeline).

Tests cover:
- PipelineError formatting
- Pipeline.resolve_spec from catalog, spec file and prompt
- Pipeline.run success and failure states
- main() argument handling, including the unknown-archetype exit code
"""

from __future__ import annotations

import json
import sys
import zipfile
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from appforge.config import Config
from appforge.inference.prompt import CompletionError
from appforge.inference.schema import DirectoryCorpus, SupabaseCorpus
from appforge.models import AppSpec, AppType, CorpusEntry, Database
from appforge.pipeline import Pipeline, PipelineError, main

pytestmark = pytest.mark.unit


class TestPipelineError:
    def test_message(self):
        err = PipelineError(1, "boom")
        assert err.step == 1
        assert str(err) == "Step 1 (RESOLVE): boom"


class TestResolveSpec:
    async def test_from_catalog(self, test_config):
        spec = await Pipeline(test_config).resolve_spec(app_type="blog")
        assert spec.type is AppType.BLOG

    async def test_unknown_type(self, test_config):
        with pytest.raises(PipelineError, match="Unknown application type"):
            await Pipeline(test_config).resolve_spec(app_type="spaceship")

    async def test_from_file(self, test_config, tmp_path, blog_spec):
        path = tmp_path / "spec.json"
        path.write_text(blog_spec.model_dump_json(), encoding="utf-8")
        assert await Pipeline(test_config).resolve_spec(spec_path=path) == blog_spec

    async def test_invalid_file(self, test_config, tmp_path):
        path = tmp_path / "spec.json"
        path.write_text(json.dumps({"name": "X", "database": "oracle"}), encoding="utf-8")
        with pytest.raises(PipelineError, match="Invalid spec file"):
            await Pipeline(test_config).resolve_spec(spec_path=path)

    async def test_missing_file(self, test_config, tmp_path):
        with pytest.raises(PipelineError, match="Cannot read"):
            await Pipeline(test_config).resolve_spec(spec_path=tmp_path / "missing.json")

    async def test_from_prompt(self, test_config):
        inferred = AppSpec(name="Recipes", database=Database.SQLITE)
        with patch("appforge.pipeline.SpecInferrer") as inferrer_cls:
            inferrer_cls.return_value.infer = AsyncMock(return_value=inferred)
            spec = await Pipeline(test_config).resolve_spec(prompt="a recipe site")
        assert spec is inferred
        inferrer_cls.return_value.infer.assert_awaited_once_with("a recipe site")

    async def test_prompt_failure(self, test_config):
        with patch("appforge.pipeline.SpecInferrer") as inferrer_cls:
            inferrer_cls.return_value.infer = AsyncMock(side_effect=CompletionError("offline"))
            with pytest.raises(PipelineError, match="offline"):
                await Pipeline(test_config).resolve_spec(prompt="x")

    async def test_no_source(self, test_config):
        with pytest.raises(PipelineError, match="required"):
            await Pipeline(test_config).resolve_spec()


class TestRun:
    async def test_writes_archive_to_default_location(self, test_config):
        state = await Pipeline(test_config).run(app_type="portfolio")
        assert state["success"] is True
        archive = test_config.output_dir / "portfolio-website.zip"
        assert state["archive"] == str(archive)
        with zipfile.ZipFile(archive) as zf:
            assert "src/App.tsx" in zf.namelist()
            assert not any(name.startswith("server/") for name in zf.namelist())

    async def test_extract_and_docs(self, test_config, tmp_path):
        out = tmp_path / "blog.zip"
        state = await Pipeline(test_config).run(
            app_type="blog", output=out, extract=tmp_path / "blog", docs=True
        )
        assert state["success"] is True
        assert (tmp_path / "blog" / "server" / "index.js").exists()
        docs = tmp_path / "blog-platform.openapi.yaml"
        assert state["docs"] == str(docs)
        assert "/api/posts/{id}" in docs.read_text(encoding="utf-8")

    async def test_docs_skipped_without_server(self, test_config, tmp_path):
        state = await Pipeline(test_config).run(app_type="landing", output=tmp_path / "l.zip", docs=True)
        assert state["success"] is True
        assert "docs" not in state

    async def test_infer_from_directory(self, test_config, tmp_path):
        corpus = tmp_path / "corpus"
        corpus.mkdir()
        (corpus / "shop.js").write_text("const products = [];", encoding="utf-8")
        out = tmp_path / "app.zip"
        state = await Pipeline(test_config).run(app_type="blog", infer_from=corpus, output=out)
        assert state["success"] is True
        with zipfile.ZipFile(out) as zf:
            assert "server/models/products.js" in zf.namelist()

    async def test_docs_for_name_with_slash(self, test_config, tmp_path):
        path = tmp_path / "tool.json"
        spec = AppSpec(name="Client/Server Tool", database=Database.SQLITE)
        path.write_text(spec.model_dump_json(), encoding="utf-8")
        state = await Pipeline(test_config).run(spec_path=path, docs=True)
        assert state["success"] is True
        assert state["archive"] == str(test_config.output_dir / "client-server-tool.zip")
        assert state["docs"] == str(test_config.output_dir / "client-server-tool.openapi.yaml")

    async def test_docs_write_failure_is_a_step_error(self, test_config, tmp_path):
        out = tmp_path / "blog.zip"
        with patch.object(Pipeline, "write_docs", side_effect=OSError("read-only")):
            state = await Pipeline(test_config).run(app_type="blog", output=out, docs=True)
        assert state["success"] is False
        assert state["error"].startswith("Step 4 (EXPORT)")
        assert "read-only" in state["error"]

    async def test_infer_from_supabase(self, test_config):
        config = test_config.model_copy(
            update={
                "corpus": test_config.corpus.model_copy(
                    update={
                        "supabase_url": "https://x.supabase.co",
                        "supabase_key": "anon",
                        "user_id": "u1",
                    }
                )
            }
        )
        pipeline = Pipeline(config)
        source = pipeline.corpus_source("supabase")
        assert isinstance(source, SupabaseCorpus)
        assert source.url == "https://x.supabase.co"
        assert source.user_id == "u1"
        assert isinstance(pipeline.corpus_source("./projects"), DirectoryCorpus)

        fetch = AsyncMock(return_value=[CorpusEntry(name="p1", source_text="const products = [];")])
        with patch.object(SupabaseCorpus, "fetch_recent", fetch):
            tables = await pipeline.infer_tables("supabase")
        assert [t.name for t in tables] == ["users", "products"]
        fetch.assert_awaited_once_with(config.corpus.limit)

    async def test_unconfigured_supabase_degrades(self, test_config, tmp_path):
        out = tmp_path / "blog.zip"
        state = await Pipeline(test_config).run(app_type="blog", infer_from="supabase", output=out)
        assert state["success"] is True

    async def test_unknown_type_fails_without_generating(self, test_config):
        generator = MagicMock()
        state = await Pipeline(test_config, generator=generator).run(app_type="spaceship")
        assert state["success"] is False
        assert "Unknown application type" in state["error"]
        generator.generate_app.assert_not_called()


class TestMain:
    def test_unknown_archetype_exits_1(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["appforge", "--type", "spaceship"])
        with patch("appforge.pipeline.Pipeline") as pipeline_cls:
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
        pipeline_cls.assert_not_called()

    def test_missing_spec_file_exits_1(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "argv", ["appforge", "--spec", str(tmp_path / "nope.json")])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1

    def test_source_is_required(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["appforge"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2

    def test_sources_are_exclusive(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["appforge", "--type", "blog", "--prompt", "x"])
        with pytest.raises(SystemExit):
            main()

    def test_success(self, monkeypatch, tmp_path):
        out = tmp_path / "blog.zip"
        monkeypatch.setattr(sys, "argv", ["appforge", "--type", "blog", "-o", str(out)])
        monkeypatch.setattr(Config, "from_env", classmethod(lambda cls: Config(output_dir=tmp_path)))
        main()
        assert out.exists()

    def test_failed_run_exits_1(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["appforge", "--prompt", "x"])
        with patch("appforge.pipeline.Pipeline") as pipeline_cls:
            pipeline_cls.return_value.run = AsyncMock(return_value={"success": False})
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
