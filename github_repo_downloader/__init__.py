"""Download a GitHub repository's files into one annotated text file.

Lists the recursive git tree, filters paths with glob-style patterns,
fetches each file's raw content and writes a single document.
"""

from .cli import main
from .client import FetchError, GitHubClient
from .models import DownloadOptions, DownloadResult, FileContent, TreeItem
from .orchestrator import download_repository

__all__ = [
    "main",
    "download_repository",
    "GitHubClient",
    "FetchError",
    "DownloadOptions",
    "DownloadResult",
    "FileContent",
    "TreeItem",
]
