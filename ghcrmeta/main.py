"""Main CLI entry point for ghcrmeta."""

import argparse
import json
import sys
import logging
from typing import Dict, Any

from tqdm import tqdm

from .config.settings import Config
from .operations.describe import DescribeOperation
from .operations.search import SearchOperation
from .registry.resolver import RegistryClient
from .utils.logger import setup_logging


logger = logging.getLogger(__name__)


def print_json_output(data: Dict[str, Any]):
    """Print formatted JSON output."""
    print(json.dumps(data, indent=2))


def _fail(operation: str, error: Exception):
    logger.error(f"{operation} failed: {error}")
    print_json_output({
        "Operation": operation,
        "Status": "Failed",
        "Error": str(error)
    })
    sys.exit(1)


def handle_search(args):
    """Handle search command."""
    try:
        config = Config(args.config)
        with RegistryClient(config) as client:
            search_op = SearchOperation(client, args.num_workers)

            def stream(entry, result):
                tqdm.write(json.dumps(entry.to_dict()), file=sys.stderr)

            result = search_op.search(
                term=args.term,
                enrich=not args.no_enrich,
                bypass_cache=args.no_cache,
                progress_callback=stream if args.stream else None,
                show_progress=args.progress
            )

        print_json_output({
            "Operation": "Search",
            "Term": result['term'],
            "Mode": result['mode'],
            "Packages": [entry.to_dict() for entry in result['entries']]
        })

    except Exception as e:
        _fail("Search", e)


def handle_tags(args):
    """Handle tags command."""
    try:
        config = Config(args.config)
        with RegistryClient(config) as client:
            repository = client.repository(args.repository)
            tags = client.list_tags(repository, args.no_cache) if repository else []

        print_json_output({
            "Operation": "Tags",
            "Repository": repository.full_name if repository else args.repository,
            "Tags": tags
        })

    except Exception as e:
        _fail("Tags", e)


def handle_describe(args):
    """Handle describe command."""
    try:
        config = Config(args.config)
        with RegistryClient(config) as client:
            result = DescribeOperation(client).describe(
                args.repository, tag=args.tag, bypass_cache=args.no_cache
            )

        print_json_output({
            "Operation": "Describe",
            "Repository": result['name'],
            "Tag": result['selected_tag'],
            "Tags": result['tags'],
            "Description": result['description']
        })

    except Exception as e:
        _fail("Describe", e)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='ghcrmeta',
        description='Lists packages, tags and image descriptions for the ghcr.io/versa-node organization without pulling images.'
    )

    parser.add_argument(
        '--config',
        help='YAML configuration file (default: $GHCRMETA_CONFIG)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='WARNING',
        help='Set logging level (default: WARNING)'
    )
    parser.add_argument(
        '--log-file',
        help='Log to file in addition to console'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Search command
    search_parser = subparsers.add_parser(
        'search',
        help='Search the org packages',
        description='Lists all org packages when TERM is empty, or the single repository TERM names, and resolves missing descriptions.'
    )
    search_parser.add_argument('term', nargs='?', default='', help='Search term, e.g. versa-node/web')
    search_parser.add_argument(
        '--no-enrich',
        action='store_true',
        help="Don't resolve image label descriptions"
    )
    search_parser.add_argument(
        '--no-cache',
        action='store_true',
        help='Bypass cached lookups'
    )
    search_parser.add_argument(
        '--stream',
        action='store_true',
        help='Write each resolved description to stderr as it arrives'
    )
    search_parser.add_argument(
        '--progress',
        action='store_true',
        help='Show a progress bar while resolving descriptions'
    )
    search_parser.add_argument(
        '--num-workers',
        type=int,
        default=None,
        help='Number of concurrent resolutions (default: max_workers setting)'
    )
    search_parser.set_defaults(func=handle_search)

    # Tags command
    tags_parser = subparsers.add_parser(
        'tags',
        help='List tags of a repository',
        description="Lists a repository's tags, 'latest' first and the rest newest first."
    )
    tags_parser.add_argument('repository', help='Repository name, e.g. web or ghcr.io/versa-node/web')
    tags_parser.add_argument(
        '--no-cache',
        action='store_true',
        help='Bypass cached lookups'
    )
    tags_parser.set_defaults(func=handle_tags)

    # Describe command
    describe_parser = subparsers.add_parser(
        'describe',
        help='Show tags and description of a repository',
        description='Resolves the description label of a repository tag through its manifest and config blob.'
    )
    describe_parser.add_argument('repository', help='Repository name, e.g. web or ghcr.io/versa-node/web')
    describe_parser.add_argument(
        '--tag',
        help="Tag to describe (default: 'latest' if present, else the newest tag)"
    )
    describe_parser.add_argument(
        '--no-cache',
        action='store_true',
        help='Bypass cached lookups'
    )
    describe_parser.set_defaults(func=handle_describe)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level, args.log_file)

    args.func(args)


if __name__ == '__main__':
    main()
