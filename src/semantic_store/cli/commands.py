"""
CLI commands - thin wrappers around the ingestion and retrieval services.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment (.env)
3. Build services from configuration
4. Print results
5. Return exit code

Exit codes: 0 success, 1 store/provider failure, 2 invalid input,
130 interrupted.

The memory backend lives only for one process, so store and search in
separate invocations need SEMANTIC_STORE_BACKEND=postgres.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Sequence

from dotenv import load_dotenv

from semantic_store.core.errors import InvalidInput, SemanticStoreError
from semantic_store.documents import DocumentType
from semantic_store.observability import init_tracing, shutdown_tracing
from semantic_store.seeds import seed_workspace
from semantic_store.services import SemanticStoreServices, build_services

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_metadata(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidInput("--metadata must be a JSON object", original_error=e) from e
    if not isinstance(value, dict):
        raise InvalidInput("--metadata must be a JSON object")
    return value


def _load_batch_file(path: str) -> list[Any]:
    try:
        payload = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInput(f"Could not read batch file {path}", original_error=e) from e

    # Accept the web client's {"documents": [...]} envelope too
    if isinstance(payload, dict):
        payload = payload.get("documents")
    if not isinstance(payload, list) or not payload:
        raise InvalidInput("Documents array is required and must not be empty")
    return payload


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


# ---------------------------------------------------------------------------
# COMMANDS
# ---------------------------------------------------------------------------


def run_init_schema(services: SemanticStoreServices, args: argparse.Namespace) -> int:
    """Create the documents table and vector index."""
    services.store.create_schema()
    print(f"Schema ready ({services.config.backend}, dimensions={services.config.embedding_dim})")
    return 0


def run_store(services: SemanticStoreServices, args: argparse.Namespace) -> int:
    """Store a single document."""
    doc = services.ingestion.store_one(
        args.content,
        _parse_metadata(args.metadata),
        args.workspace,
        args.type,
    )
    _print_json({"success": True, "data": doc.to_dict()})
    return 0


def run_store_batch(services: SemanticStoreServices, args: argparse.Namespace) -> int:
    """Store every document in a JSON file, skipping incomplete items."""
    items = _load_batch_file(args.file)
    result = services.ingestion.store_batch(items, fail_fast=args.fail_fast)
    _print_json(result.to_report().model_dump(mode="json"))
    return 1 if result.has_failures else 0


def run_search(services: SemanticStoreServices, args: argparse.Namespace) -> int:
    """Search for documents similar to a query."""
    response = services.retrieval.search(args.query, args.workspace, args.limit)

    if args.json:
        _print_json(response.model_dump(mode="json"))
        return 0

    print("=" * 60)
    print(f"SEARCH: {args.query}")
    print("=" * 60)
    for rank, hit in enumerate(response.data, start=1):
        preview = hit.content if len(hit.content) <= 70 else hit.content[:67] + "..."
        print(f"  {rank}. [{hit.score:.3f}] ({hit.document_type.value}) {preview}")
        print(f"        id={hit.id} workspace={hit.workspace_id}")
    print(f"\nResults: {response.count}")
    return 0


def run_seed(services: SemanticStoreServices, args: argparse.Namespace) -> int:
    """Store the sample financial documents in a workspace."""
    result = seed_workspace(services.ingestion, args.workspace)
    print(f"Seeded {len(result)} documents into {args.workspace}")
    for failure in result.failures:
        print(f"  [FAIL] item {failure.index}: {failure.error.message}")
    return 1 if result.has_failures else 0


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from e
    if number <= 0:
        raise argparse.ArgumentTypeError("limit must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semantic-store",
        description="Workspace-scoped semantic document store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  semantic-store init-schema
  semantic-store store --workspace ws1 --type insight "Revenue grew 12% YoY"
  semantic-store store-batch documents.json
  semantic-store search "revenue growth" --workspace ws1 --limit 3
  semantic-store seed --workspace demo
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-schema", help="Create table and vector index")
    init.set_defaults(handler=run_init_schema)

    store = sub.add_parser("store", help="Store one document")
    store.add_argument("content", help="Text to store")
    store.add_argument("--workspace", required=True, help="Owning workspace id")
    store.add_argument(
        "--type",
        default=DocumentType.OTHER.value,
        choices=[t.value for t in DocumentType],
        help="Document type (default: other)",
    )
    store.add_argument("--metadata", help="Metadata as a JSON object")
    store.set_defaults(handler=run_store)

    batch = sub.add_parser("store-batch", help="Store documents from a JSON file")
    batch.add_argument("file", help="JSON array (or {\"documents\": [...]})")
    batch.add_argument("--fail-fast", action="store_true", help="Abort on first failure")
    batch.set_defaults(handler=run_store_batch)

    search = sub.add_parser("search", help="Search by similarity")
    search.add_argument("query", help="Free-text query")
    search.add_argument("--workspace", default=None, help="Restrict to one workspace")
    search.add_argument("--limit", type=_positive_int, default=5, help="Max results (default: 5)")
    search.add_argument("--json", action="store_true", help="Print JSON")
    search.set_defaults(handler=run_search)

    seed = sub.add_parser("seed", help="Store sample financial documents")
    seed.add_argument("--workspace", required=True, help="Workspace to seed")
    seed.set_defaults(handler=run_seed)

    return parser


def main(
    argv: Sequence[str] | None = None,
    services_factory: Callable[[], SemanticStoreServices] = build_services,
) -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        semantic-store init-schema
        semantic-store store --workspace ws1 "text"
        semantic-store store-batch docs.json
        semantic-store search "query" --workspace ws1
        semantic-store seed --workspace demo
    """
    load_dotenv()

    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    init_tracing()

    services = None
    try:
        services = services_factory()
        return args.handler(services, args)
    except InvalidInput as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    except SemanticStoreError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    finally:
        if services is not None:
            services.close()
        shutdown_tracing()


if __name__ == "__main__":
    sys.exit(main())
