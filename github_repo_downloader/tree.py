"""List the files of a repository branch via the git trees API."""

import logging
from collections.abc import Iterable
from urllib.parse import quote

from .client import GitHubClient
from .models import API_BASE, DownloadOptions, TreeItem
from .patterns import should_include

logger = logging.getLogger(__name__)


def tree_url(options: DownloadOptions) -> str:
    return f"{API_BASE}/repos/{options.owner}/{options.name}/git/trees/{quote(options.branch, safe='/')}?recursive=1"


def list_tree(
    client: GitHubClient,
    options: DownloadOptions,
    include: Iterable[str] = (),
    exclude: Iterable[str] = (),
) -> list[TreeItem]:
    """Fetch the recursive tree and keep the files that pass the path filters.

    Order is the API's. Fetch failures propagate to the caller.
    """
    include, exclude = list(include), list(exclude)
    logger.info("Getting repository tree for %s (branch: %s)", options.repository, options.branch)

    data = client.fetch_with_retry(tree_url(options)).json()
    if data.get("truncated"):
        logger.warning("Tree listing for %s was truncated by the API; some files are missing", options.repository)

    files = []
    for entry in data.get("tree", []):
        item = TreeItem.from_api(entry)
        if item.is_file and should_include(item.path, include, exclude):
            files.append(item)

    logger.info("Found %d files after applying filters", len(files))
    return files
