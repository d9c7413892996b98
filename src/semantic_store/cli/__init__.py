"""
CLI module - command-line interface for the semantic store.

Provides entry points for:
- Creating the schema and vector index
- Storing single documents and batches
- Searching
- Seeding sample data
"""

from semantic_store.cli.commands import (
    main,
    build_parser,
    run_init_schema,
    run_store,
    run_store_batch,
    run_search,
    run_seed,
)

__all__ = [
    "main",
    "build_parser",
    "run_init_schema",
    "run_store",
    "run_store_batch",
    "run_search",
    "run_seed",
]
