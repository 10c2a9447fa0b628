"""Serialize downloaded files into a single annotated text document."""

import logging
import os
import re
import stat
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from .models import DownloadOptions, FileContent

logger = logging.getLogger(__name__)

HEADER_RULE = "=" * 80
FILE_RULE = "-" * 60

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def output_file_name(options: DownloadOptions) -> str:
    """Explicit output name, or ``owner_name_branch.txt`` with unsafe chars as ``_``."""
    if options.output_file:
        return options.output_file
    safe_name = _UNSAFE_CHARS.sub("_", f"{options.owner}_{options.name}_{options.branch}")
    return f"{safe_name}.txt"


def _iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def render_document(
    options: DownloadOptions,
    contents: list[FileContent],
    generated_at: datetime | None = None,
) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [
        f"GitHub Repository: {options.repository}",
        f"Branch: {options.branch}",
        f"Generated: {_iso_timestamp(generated_at)}",
        f"Total Files: {len(contents)}",
        HEADER_RULE,
        "",
    ]
    for file in contents:
        lines.extend([
            f"=== {file.path} ===",
            f"Size: {file.size} characters",
            FILE_RULE,
            file.content,
            "",
        ])
    return "\n".join(lines)


def _file_mode(path: Path) -> int:
    """Permissions for a new output file: the existing file's, else 0o666 minus umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_output(options: DownloadOptions, contents: list[FileContent], output_dir: Path) -> Path:
    """Write the document to ``output_dir``, replacing any existing file atomically.

    The directory is created if missing. OS errors propagate.
    """
    name = Path(output_file_name(options))
    if name.is_absolute():
        # Absolute names stay under output_dir
        name = name.relative_to(name.anchor)
    output_path = Path(output_dir) / name
    output_path.parent.mkdir(parents=True, exist_ok=True)
    document = render_document(options, contents)
    mode = _file_mode(output_path)

    fd, tmp_name = tempfile.mkstemp(dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(document)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote %d files to %s", len(contents), output_path)
    return output_path
