"""Data models and constants for repository downloads."""

from dataclasses import dataclass

API_BASE = "https://api.github.com"
RAW_BASE = "https://raw.githubusercontent.com"
DEFAULT_BRANCH = "main"


@dataclass(frozen=True)
class DownloadOptions:
    """What to download: an "owner/name" repository at a branch."""

    repository: str
    branch: str = DEFAULT_BRANCH
    output_file: str | None = None

    @property
    def owner(self) -> str:
        return self.repository.split("/")[0]

    @property
    def name(self) -> str:
        return self.repository.split("/")[1]


@dataclass(frozen=True)
class TreeItem:
    """One entry of a recursive git tree listing."""

    path: str
    type: str  # "blob" or "tree"
    sha: str
    size: int | None = None

    @property
    def is_file(self) -> bool:
        return self.type == "blob"

    @classmethod
    def from_api(cls, entry: dict) -> "TreeItem":
        return cls(
            path=entry["path"],
            type=entry.get("type", ""),
            sha=entry.get("sha", ""),
            size=entry.get("size"),
        )


@dataclass(frozen=True)
class FileContent:
    """Downloaded content of a single file, or a placeholder on failure."""

    path: str
    content: str
    size: int


@dataclass(frozen=True)
class DownloadResult:
    """Summary of one download run."""

    repository: str
    branch: str
    total_files: int
    total_size: int
    output_file: str
    duration_ms: int
