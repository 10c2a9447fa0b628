"""Download raw file contents one at a time."""

import logging
import sys
import time
from urllib.parse import quote

import httpx

from .client import FetchError, GitHubClient
from .models import RAW_BASE, DownloadOptions, FileContent, TreeItem

logger = logging.getLogger(__name__)

PROGRESS_PATH_WIDTH = 50


def raw_url(options: DownloadOptions, path: str) -> str:
    return f"{RAW_BASE}/{options.owner}/{options.name}/{quote(options.branch, safe='/')}/{quote(path, safe='/')}"


def failure_placeholder(message: str) -> str:
    return f"[Failed to download: {message}]"


def download_file(
    client: GitHubClient,
    options: DownloadOptions,
    item: TreeItem,
    delay_ms: int = 0,
) -> FileContent:
    """Fetch one file's raw content, or a placeholder if the fetch fails."""
    if delay_ms > 0:
        time.sleep(delay_ms / 1000)

    try:
        content = client.fetch_with_retry(raw_url(options, item.path)).text
    except (FetchError, httpx.HTTPError) as exc:
        logger.warning("Failed to download %s: %s", item.path, exc)
        return FileContent(path=item.path, content=failure_placeholder(str(exc)), size=0)

    return FileContent(path=item.path, content=content, size=len(content))


def _truncate_path(path: str) -> str:
    if len(path) > PROGRESS_PATH_WIDTH:
        return path[:PROGRESS_PATH_WIDTH] + "..."
    return path


def download_all(
    client: GitHubClient,
    options: DownloadOptions,
    items: list[TreeItem],
    delay_ms: int = 0,
    progress: bool = True,
) -> list[FileContent]:
    """Download every item in order. Per-file failures become placeholders."""
    contents = []
    total = len(items)

    for index, item in enumerate(items, start=1):
        contents.append(download_file(client, options, item, delay_ms))
        if progress:
            percent = round(index / total * 100)
            line = f"Progress: {index}/{total} ({percent}%) - {_truncate_path(item.path)}"
            sys.stdout.write(f"\033[2K\r{line}")
            sys.stdout.flush()

    if progress and total:
        sys.stdout.write("\n")
        sys.stdout.flush()
    return contents
