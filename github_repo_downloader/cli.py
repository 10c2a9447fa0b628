"""Command line entry point for downloading a repository into one file."""

import argparse
import logging
import sys

from pydantic import ValidationError

from .models import DEFAULT_BRANCH, DownloadOptions
from .orchestrator import download_repository
from .settings import get_settings

logger = logging.getLogger("github_repo_downloader")

RULE = "─" * 50


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-download",
        description="Download every file of a GitHub repository into a single text file",
        epilog=(
            "Example: github-download facebook/react main react_code.txt\n\n"
            "Environment: GITHUB_TOKEN, INCLUDE_PATTERNS, EXCLUDE_PATTERNS, OUTPUT_DIR, API_DELAY_MS"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    # Optional here so a missing repository exits 1 like every other argument error
    parser.add_argument(
        "repository",
        nargs="?",
        help="Repository as owner/repo (e.g., facebook/react)",
    )
    parser.add_argument(
        "branch",
        nargs="?",
        default=DEFAULT_BRANCH,
        help=f"Branch to download (default: {DEFAULT_BRANCH})",
    )
    parser.add_argument(
        "output_file",
        nargs="?",
        default=None,
        help="Output file name (default: owner_repo_branch.txt)",
    )
    return parser


def parse_arguments(argv: list[str] | None = None) -> DownloadOptions:
    """Parse CLI arguments, exiting with status 1 on a missing or malformed repository."""
    parser = _build_parser()
    # Extra positionals are ignored
    args, _ = parser.parse_known_args(argv)

    if not args.repository:
        parser.print_usage(sys.stderr)
        parser.exit(1, "error: repository not specified\n")

    owner, _, name = args.repository.partition("/")
    if not owner or not name:
        parser.print_usage(sys.stderr)
        parser.exit(1, 'error: repository must be in format "owner/repo" (e.g., facebook/react)\n')

    return DownloadOptions(
        repository=args.repository,
        branch=args.branch or DEFAULT_BRANCH,
        output_file=args.output_file or None,
    )


def main(argv: list[str] | None = None):
    options = parse_arguments(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration:\n{exc}\n")
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    print(f"Repository: {options.repository}")
    print(f"Branch: {options.branch}")
    if options.output_file:
        print(f"Output file: {options.output_file}")
    print(RULE)

    try:
        result = download_repository(options, settings)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        sys.exit(1)
    except Exception:
        logger.exception("Download failed")
        sys.exit(1)

    print(RULE)
    print("Summary:")
    print(f"Repository: {result.repository}")
    print(f"Branch: {result.branch}")
    print(f"Files processed: {result.total_files:,}")
    print(f"Total size: {result.total_size:,} characters")
    print(f"Output file: {result.output_file or '(none, no files matched)'}")
    print(f"Duration: {result.duration_ms}ms")
    print(RULE)


if __name__ == "__main__":
    main()
