# Imports
import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from repo_adapter.adapter import RepositoryContentAdapter
from repo_adapter.config import load_settings
from repo_adapter.models import FileNode, ScaffoldPolicy
from repo_adapter.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    ScaffoldError,
)

# Logger
logger = logging.getLogger(__name__)


# Helpers
def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Project repository content tool")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="Print a file")
    get.add_argument("project")
    get.add_argument("path")

    ls = sub.add_parser("ls", help="List a directory")
    ls.add_argument("project")
    ls.add_argument("path", nargs="?", default="")

    put = sub.add_parser("put", help="Create or update a file")
    put.add_argument("project")
    put.add_argument("path")
    put.add_argument("-f", "--file", help="Local file to upload (stdin when omitted)")
    put.add_argument("-m", "--message", required=True)

    rm = sub.add_parser("rm", help="Delete a file")
    rm.add_argument("project")
    rm.add_argument("path")
    rm.add_argument("-m", "--message", required=True)

    create = sub.add_parser("create", help="Create the project repository")
    create.add_argument("project")

    scaffold = sub.add_parser("scaffold", help="Commit every file of a local directory")
    scaffold.add_argument("project")
    scaffold.add_argument("directory")
    scaffold.add_argument("--fail-fast", action="store_true")

    return parser


def collect_files(directory: str) -> List[FileNode]:
    """Read every file under a local directory as upload nodes, sorted by path."""
    root = Path(directory)
    if not root.is_dir():
        raise ValueError(f"Not a directory: {directory}")
    return [
        FileNode.for_upload(p.relative_to(root).as_posix(), p.read_text(encoding="utf-8"))
        for p in sorted(root.rglob("*"))
        if p.is_file()
    ]


def _run(adapter: RepositoryContentAdapter, args: argparse.Namespace) -> int:
    if args.command == "get":
        print(adapter.get_file(args.project, args.path).content, end="")
    elif args.command == "ls":
        for node in adapter.list_files(args.project, args.path):
            print(f"{node.kind.value:<8} {node.size:>8}  {node.path}")
    elif args.command == "put":
        content = Path(args.file).read_text(encoding="utf-8") if args.file else sys.stdin.read()
        adapter.commit_file(args.project, args.path, content, args.message)
    elif args.command == "rm":
        adapter.delete_file(args.project, args.path, args.message)
    elif args.command == "create":
        print(adapter.create_repository(args.project))
    elif args.command == "scaffold":
        policy = ScaffoldPolicy.FAIL_FAST if args.fail_fast else None
        outcomes = adapter.scaffold_project_files(
            args.project, collect_files(args.directory), policy=policy
        )
        for outcome in outcomes:
            print(f"{'ok' if outcome.ok else 'FAILED':<6} {outcome.path}")
        if not all(outcome.ok for outcome in outcomes):
            return 6
    return 0


# Execution
def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S"
    )

    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = load_settings()
        with RepositoryContentAdapter(settings) as adapter:
            return _run(adapter, args)

    except KeyboardInterrupt:
        logger.info("\nInterrupted")
        return 130
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 5
    except AuthenticationError as e:
        logger.error(f"Authentication failed: {e}")
        return 2
    except NotFoundError as e:
        logger.error(f"Not found: {e}")
        return 3
    except ConflictError as e:
        logger.error(f"Conflict: {e}")
        return 4
    except RateLimitError as e:
        logger.error(f"Rate limit exceeded: {e}")
        return 7
    except (ProviderError, ScaffoldError) as e:
        logger.error(f"Provider error: {e}")
        return 6
    except ValueError as e:
        logger.error(f"Invalid argument: {e}")
        return 5
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
