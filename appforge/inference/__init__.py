"""Spec and schema inference.

Two heuristics feed the generator:

    SchemaInferrer  - proposes database tables from a user's previous projects
    SpecInferrer    - turns a free-text prompt into an ``AppSpec`` via an LLM
"""

from .prompt import CompletionClient, CompletionError, CompletionResponse, SpecInferrer
from .schema import (
    CorpusUnavailableError,
    DirectoryCorpus,
    SchemaInferrer,
    StaticCorpus,
    SupabaseCorpus,
    infer_tables,
)

__all__ = [
    "CompletionClient",
    "CompletionError",
    "CompletionResponse",
    "CorpusUnavailableError",
    "DirectoryCorpus",
    "SchemaInferrer",
    "SpecInferrer",
    "StaticCorpus",
    "SupabaseCorpus",
    "infer_tables",
]
