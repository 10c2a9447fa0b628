"""Run a full download: list the tree, fetch every file, write one document."""

import logging
import time

from .client import GitHubClient
from .downloader import download_all
from .models import DownloadOptions, DownloadResult
from .output import write_output
from .settings import Settings
from .tree import list_tree

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def download_repository(
    options: DownloadOptions,
    settings: Settings,
    client: GitHubClient | None = None,
    progress: bool = True,
) -> DownloadResult:
    """Download ``options.repository`` into a single text file.

    Listing and write failures propagate. Individual file failures do not:
    they show up as placeholder content in the output. When nothing passes
    the filters no file is written and ``output_file`` is empty.
    """
    if client is None:
        with GitHubClient(token=settings.github_token) as owned_client:
            return download_repository(options, settings, client=owned_client, progress=progress)

    start = time.monotonic()

    files = list_tree(client, options, settings.include_patterns, settings.exclude_patterns)
    if not files:
        logger.info("No files to download after filtering")
        return DownloadResult(
            repository=options.repository,
            branch=options.branch,
            total_files=0,
            total_size=0,
            output_file="",
            duration_ms=_elapsed_ms(start),
        )

    logger.info("Downloading %d files...", len(files))
    contents = download_all(client, options, files, delay_ms=settings.api_delay_ms, progress=progress)
    output_path = write_output(options, contents, settings.output_dir)

    return DownloadResult(
        repository=options.repository,
        branch=options.branch,
        total_files=len(contents),
        total_size=sum(file.size for file in contents),
        output_file=str(output_path),
        duration_ms=_elapsed_ms(start),
    )
