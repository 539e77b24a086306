"""
Command line entry point.

    docseek index DOCS_DIR [--output index.json]   build and save an index
    docseek serve [--index index.json] [--port N]   serve an existing index
    docseek search QUERY [--index index.json]       one-off query, prints JSON
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .document_processor import TextExtractor, discover_documents
from .logging_config import setup_logging
from .query_service import DEFAULT_RESULT_LIMIT, answer_query, encode_results, parse_result_limit
from .tfidf.errors import DocseekError
from .tfidf.index_builder import build_index
from .tfidf.persistence import load_index_file, save_index_file

logger = logging.getLogger(__name__)


def cmd_index(args: argparse.Namespace) -> int:
    if not os.path.isdir(args.docs_dir):
        logger.error(f"Not a directory: {args.docs_dir}")
        return 2

    extractor = TextExtractor()
    result = build_index(discover_documents(args.docs_dir), extractor.extract_file)

    for failure in result.failures:
        logger.warning(f"Not indexed: {failure.document_id} ({failure.reason})")

    save_index_file(result.index, args.output)
    print(f"Indexed {result.indexed_count} documents into {args.output}, {result.failed_count} failed")

    if args.strict and result.failed_count:
        return 1
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    # main() already configured logging, so the server module keeps it
    from . import main as server
    server.INDEX_PATH = args.index

    uvicorn.run(server.app, host=args.host, port=args.port)
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    index = load_index_file(args.index)
    results = answer_query(index, args.query, limit=args.limit)
    print(encode_results(results).decode("utf-8"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docseek", description="TF-IDF document search")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    parser.add_argument("--log-file", default=os.getenv("LOG_FILE", "logs/docseek.log"),
                        help="base name of session log files ('' disables)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_index = sub.add_parser("index", help="build an index from a directory")
    p_index.add_argument("docs_dir", nargs="?", default=os.getenv("DOCS_DIR", "docs"))
    p_index.add_argument("-o", "--output", default=os.getenv("INDEX_PATH", "index.json"))
    p_index.add_argument("--strict", action="store_true", help="exit 1 if any document failed")
    p_index.set_defaults(func=cmd_index)

    p_serve = sub.add_parser("serve", help="serve search over HTTP")
    p_serve.add_argument("--index", default=os.getenv("INDEX_PATH", "index.json"))
    p_serve.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    p_serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "6969")))
    p_serve.set_defaults(func=cmd_serve)

    p_search = sub.add_parser("search", help="run one query against an index file")
    p_search.add_argument("query")
    p_search.add_argument("--index", default=os.getenv("INDEX_PATH", "index.json"))
    p_search.add_argument("--limit", type=parse_result_limit, default=DEFAULT_RESULT_LIMIT)
    p_search.set_defaults(func=cmd_search)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    console_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_file=args.log_file or None, console_level=console_level)

    try:
        return args.func(args)
    except DocseekError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
