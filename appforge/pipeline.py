"""appforge pipeline orchestrator and CLI.

Runs one generation end to end:

    1. RESOLVE   -- pick the ``AppSpec`` (catalog archetype, JSON file or prompt)
    2. INFER     -- optionally derive extra tables from previous projects
    3. GENERATE  -- build every file in memory
    4. EXPORT    -- write the zip archive, the extracted tree and API docs

Usage::

    python -m appforge.pipeline --type blog -o ./out/blog.zip
    python -m appforge.pipeline --spec my-app.json --extract ./my-app --docs
"""

from __future__ import annotations

import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.panel import Panel

from appforge import catalog
from appforge.config import Config
from appforge.exporter import ArchiveExportError, write_tree, write_zip
from appforge.inference.prompt import CompletionClient, CompletionError, SpecInferrer
from appforge.inference.schema import CorpusSource, DirectoryCorpus, SchemaInferrer, SupabaseCorpus
from appforge.models import AppSpec, DatabaseTable, GeneratedApp
from appforge.scaffolder.backend_gen import api_docs_to_yaml, generate_api_docs
from appforge.scaffolder.generator import AppGenerator
from appforge.utils import (
    console,
    format_size,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
)

STEP_NAMES: dict[int, str] = {
    1: "RESOLVE",
    2: "INFER",
    3: "GENERATE",
    4: "EXPORT",
}

# ``--infer-from`` value selecting the hosted project store.
SUPABASE_CORPUS = "supabase"


class PipelineError(Exception):
    """Raised when a pipeline step fails irrecoverably."""

    def __init__(self, step: int, message: str) -> None:
        self.step = step
        super().__init__(f"Step {step} ({STEP_NAMES.get(step, '?')}): {message}")


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives one generation from spec resolution to archive export.

    Args:
        config: Global configuration.  Defaults are used when omitted.
        generator: Pre-built ``AppGenerator``; one is created from
            *config* otherwise.
    """

    def __init__(self, config: Config | None = None, generator: AppGenerator | None = None) -> None:
        self.config = config or Config()
        self.generator = generator or AppGenerator(self.config)
        self.state: dict[str, Any] = {"success": False, "files": 0}

    # -- Steps -------------------------------------------------------------

    async def resolve_spec(
        self,
        app_type: str | None = None,
        spec_path: str | Path | None = None,
        prompt: str | None = None,
    ) -> AppSpec:
        """Return the ``AppSpec`` selected by exactly one of the arguments."""
        if app_type is not None:
            spec = catalog.lookup(app_type)
            if spec is None:
                raise PipelineError(1, f"Unknown application type: {app_type!r}")
            return spec

        if spec_path is not None:
            path = Path(spec_path)
            try:
                raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
                return AppSpec.model_validate_json(raw)
            except OSError as exc:
                raise PipelineError(1, f"Cannot read spec file {path}: {exc}") from exc
            except ValidationError as exc:
                raise PipelineError(1, f"Invalid spec file {path}: {exc}") from exc

        if prompt is not None:
            llm = self.config.llm
            inferrer = SpecInferrer(
                CompletionClient(base_url=llm.url, api_key=llm.api_key, timeout=llm.timeout),
                model=llm.model,
            )
            try:
                return await inferrer.infer(prompt)
            except (CompletionError, json.JSONDecodeError, ValidationError) as exc:
                raise PipelineError(1, f"Could not infer a spec from the prompt: {exc}") from exc

        raise PipelineError(1, "One of app type, spec file or prompt is required")

    def corpus_source(self, infer_from: str | Path) -> CorpusSource:
        """Return the corpus for ``--infer-from``.

        The literal ``supabase`` selects the hosted project store configured
        in ``config.corpus``; anything else is a local directory.
        """
        if str(infer_from) == SUPABASE_CORPUS:
            corpus = self.config.corpus
            return SupabaseCorpus(
                corpus.supabase_url,
                corpus.supabase_key,
                user_id=corpus.user_id,
                timeout=corpus.timeout,
            )
        return DirectoryCorpus(infer_from)

    async def infer_tables(self, infer_from: str | Path) -> list[DatabaseTable]:
        inferrer = SchemaInferrer(
            self.corpus_source(infer_from),
            limit=self.config.corpus.limit,
            timeout=self.config.corpus.timeout,
        )
        return await inferrer.analyze()

    def write_docs(self, spec: AppSpec, tables: list[DatabaseTable], path: Path) -> Path | None:
        """Write the OpenAPI document for *spec*'s server to *path*.

        Raises:
            OSError: The file could not be written.
        """
        if not spec.has_backend:
            print_warning("No server is generated for this app; skipping API docs.")
            return None
        project = self.generator.backend_project(spec, tables)
        doc = generate_api_docs(project.endpoints, title=f"{spec.name} API")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(api_docs_to_yaml(doc), encoding="utf-8")
        return path

    # -- Run ---------------------------------------------------------------

    async def run(
        self,
        app_type: str | None = None,
        spec_path: str | Path | None = None,
        prompt: str | None = None,
        infer_from: str | Path | None = None,
        output: str | Path | None = None,
        extract: str | Path | None = None,
        docs: bool = False,
    ) -> dict[str, Any]:
        """Execute every step and return the final state.

        Returns:
            A state dictionary with a top-level ``success`` boolean, the
            resolved spec name and the written paths.
        """
        start = time.monotonic()
        console.print(
            Panel(
                f"[bold bright_cyan]appforge[/bold bright_cyan]\n"
                f"Source : {app_type or spec_path or 'prompt'}\n"
                f"Output : {Path(output).resolve() if output else self.config.output_dir.resolve()}",
                title="[bold]Generation Start[/bold]",
                border_style="bright_cyan",
            )
        )

        try:
            print_step_header(STEP_NAMES[1])
            spec = await self.resolve_spec(app_type, spec_path, prompt)
            self.state["spec"] = spec.name
            print_success(f"Resolved '{spec.name}' ({spec.type.value}, {spec.mode.value})")

            tables: list[DatabaseTable] = []
            if infer_from is not None:
                print_step_header(STEP_NAMES[2])
                tables = await self.infer_tables(infer_from)
                print_success(f"Inferred {len(tables)} table(s) from {infer_from}")

            print_step_header(STEP_NAMES[3])
            app: GeneratedApp = await asyncio.to_thread(self.generator.generate_app, spec, tables)
            self.state["files"] = app.file_count
            print_success(f"Generated {app.file_count} files")

            print_step_header(STEP_NAMES[4])
            archive = Path(output) if output else self.config.archive_path(spec.slug)
            try:
                await write_zip(app, archive)
                if extract is not None:
                    await write_tree(app, extract)
                    self.state["extracted"] = str(extract)
            except ArchiveExportError as exc:
                raise PipelineError(4, str(exc)) from exc
            self.state["archive"] = str(archive)
            print_success(f"Archive written to {archive} ({format_size(archive.stat().st_size)})")

            if docs:
                docs_path = archive.with_name(f"{spec.slug}.openapi.yaml")
                try:
                    written = await asyncio.to_thread(self.write_docs, spec, tables, docs_path)
                except OSError as exc:
                    raise PipelineError(4, f"Cannot write API docs to {docs_path}: {exc}") from exc
                if written is not None:
                    self.state["docs"] = str(written)
                    print_success(f"API docs written to {written}")

        except PipelineError as exc:
            print_error(str(exc))
            self.state["error"] = str(exc)
            return self.state

        self.state["success"] = True
        summary = app.summary()
        summary["Archive"] = self.state["archive"]
        summary["Elapsed"] = f"{time.monotonic() - start:.2f}s"
        print_summary_table(summary, title=spec.name)
        return self.state


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main() -> None:
    """CLI entry point for ``python -m appforge.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="appforge -- generate a complete web application project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m appforge.pipeline --type blog\n"
            "  python -m appforge.pipeline --spec my-app.json -o ./out/my-app.zip --docs\n"
            '  python -m appforge.pipeline --prompt "a recipe sharing site" --extract ./recipes\n'
        ),
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--type",
        dest="app_type",
        help=f"Catalog archetype ({', '.join(t.value for t in catalog.available_types())})",
    )
    source.add_argument("--spec", dest="spec_path", help="Path to an AppSpec JSON file")
    source.add_argument("--prompt", help="Free-text description; requires APPFORGE_LLM_API_KEY")

    parser.add_argument(
        "--infer-from",
        default=None,
        help=(
            "Directory of previous projects to infer extra tables from, or "
            f"'{SUPABASE_CORPUS}' for the hosted project store (APPFORGE_SUPABASE_*)"
        ),
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Archive path (default: <output_dir>/<slug>.zip)",
    )
    parser.add_argument(
        "--extract",
        default=None,
        help="Also write the generated files into this directory",
    )
    parser.add_argument(
        "--docs",
        action="store_true",
        help="Write an OpenAPI description of the server next to the archive",
    )

    args = parser.parse_args()

    # Reject unknown archetypes before anything is generated.
    if args.app_type is not None and catalog.lookup(args.app_type) is None:
        console.print(f"[bold red]Error:[/bold red] Unknown application type: {args.app_type}")
        sys.exit(1)

    if args.spec_path is not None and not Path(args.spec_path).exists():
        console.print(f"[bold red]Error:[/bold red] Spec file not found: {args.spec_path}")
        sys.exit(1)

    pipeline = Pipeline(Config.from_env())
    result = asyncio.run(
        pipeline.run(
            app_type=args.app_type,
            spec_path=args.spec_path,
            prompt=args.prompt,
            infer_from=args.infer_from,
            output=args.output,
            extract=args.extract,
            docs=args.docs,
        )
    )

    if result.get("success"):
        console.print("[bold green]Generation completed successfully![/bold green]")
    else:
        console.print("[bold red]Generation failed.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
