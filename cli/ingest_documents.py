"""
CLI tool for indexing carrier underwriting guides.
Usage: python -m cli.ingest_documents [--upload FILE ...] [--all]
"""

import sys
import json
import asyncio
import argparse
import logging
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from carrierllm.core.document_store import LocalDocumentStore
from carrierllm.pipeline.ingestion import IngestionPipeline
from carrierllm.pipeline.models import IngestionSummary
from carrierllm.utils.pacing import NoDelayPacer


# ANSI color codes for terminal output
class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_summary(summary: IngestionSummary):
    """Print one ingestion batch."""
    color = Colors.GREEN if not summary.documents_failed else Colors.YELLOW
    print(f"\n{color}{summary.message}{Colors.ENDC}")
    print(f"  Offset:      {summary.offset}")
    print(f"  Failed:      {summary.documents_failed}")
    for key in summary.failed_documents:
        print(f"    - {key}")
    if summary.next_offset is not None:
        print(f"  {Colors.CYAN}Next offset: {summary.next_offset}{Colors.ENDC}")
    else:
        print(f"  {Colors.GREEN}All documents visited{Colors.ENDC}")


def upload_files(store: LocalDocumentStore, paths):
    """Copy local files into the document store under their file names."""
    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            print(f"{Colors.RED}Error: File not found: {raw_path}{Colors.ENDC}")
            sys.exit(1)
        document = store.put(path.name, path.read_bytes())
        print(f"{Colors.CYAN}Uploaded{Colors.ENDC} {document.key} ({document.size:,} bytes)")


async def run_ingestion(pipeline: IngestionPipeline, offset: int, limit, run_all: bool):
    """Run one batch, or every batch until the listing is exhausted."""
    summaries = []
    next_offset = offset
    while next_offset is not None:
        summary = await pipeline.run(offset=next_offset, limit=limit)
        summaries.append(summary)
        next_offset = summary.next_offset if run_all else None
    return summaries


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Index carrier underwriting guides into the vector store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cli.ingest_documents
  python -m cli.ingest_documents --all
  python -m cli.ingest_documents --upload guides/acme-term-guide.pdf --all
  python -m cli.ingest_documents --offset 5 --limit 5 --json
        """
    )

    parser.add_argument(
        "--upload", "-u",
        nargs="+",
        metavar="FILE",
        help="Copy documents into the document store before ingesting"
    )
    parser.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Index of the first document to process"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Documents per batch (defaults to INGEST_BATCH_SIZE)"
    )
    parser.add_argument(
        "--all", "-a",
        action="store_true",
        help="Keep ingesting batches until every document has been visited"
    )
    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Do not pause between documents"
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output summaries as JSON only"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.json else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        store = LocalDocumentStore()
        if args.upload:
            upload_files(store, args.upload)

        pipeline = IngestionPipeline(
            store=store,
            pacer=NoDelayPacer() if args.no_delay else None,
        )
        summaries = asyncio.run(run_ingestion(pipeline, args.offset, args.limit, args.all))
    except Exception as e:
        if args.json:
            print(json.dumps({"success": False, "error": str(e)}))
        else:
            print(f"\n{Colors.RED}Error: {e}{Colors.ENDC}")
        sys.exit(1)

    if args.json:
        print(json.dumps([s.model_dump(by_alias=True) for s in summaries], indent=2))
    else:
        print(f"\n{Colors.BOLD}Carrier Guide Ingestion{Colors.ENDC}")
        print("-" * 40)
        for summary in summaries:
            print_summary(summary)

    sys.exit(0 if all(not s.documents_failed for s in summaries) else 1)


if __name__ == "__main__":
    main()
