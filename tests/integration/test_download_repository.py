"""Integration tests for the full list -> download -> write pipeline.

Output is written to real tmp dirs. Only HTTP (httpx) and sleeps are mocked.
"""

import json
import re
from unittest.mock import MagicMock, patch

import httpx
import pytest

from github_repo_downloader.client import FetchError, GitHubClient
from github_repo_downloader.models import DownloadOptions
from github_repo_downloader.orchestrator import download_repository
from github_repo_downloader.settings import Settings

TREE_URL = "https://api.github.com/repos/octo/demo/git/trees/main?recursive=1"
RAW_PREFIX = "https://raw.githubusercontent.com/octo/demo/main/"

TREE = {
    "sha": "abc",
    "truncated": False,
    "tree": [
        {"path": "README.md", "type": "blob", "sha": "1", "size": 12},
        {"path": "src", "type": "tree", "sha": "2"},
        {"path": "src/app.ts", "type": "blob", "sha": "3", "size": 20},
        {"path": "src/app.test.ts", "type": "blob", "sha": "4", "size": 20},
        {"path": "src/broken.ts", "type": "blob", "sha": "5", "size": 20},
    ],
}

FILES = {
    "README.md": "# Demo\n",
    "src/app.ts": "export const x = 1;\n",
}


def _mock_response(status_code=200, json_body=None, text="", headers=None, reason="OK"):
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.reason_phrase = reason
    resp.json.return_value = json_body
    resp.text = json.dumps(json_body) if json_body is not None else text
    resp.headers = headers or {}
    return resp


def _route(url):
    if url == TREE_URL:
        return _mock_response(200, TREE)
    if url.startswith(RAW_PREFIX):
        path = url[len(RAW_PREFIX):]
        if path in FILES:
            return _mock_response(200, text=FILES[path])
    return _mock_response(404, reason="Not Found")


@pytest.fixture(autouse=True)
def _no_sleep():
    with patch("github_repo_downloader.client.time.sleep"), \
            patch("github_repo_downloader.downloader.time.sleep"):
        yield


@pytest.fixture
def client():
    c = GitHubClient(token="test-token")
    c._client.get = MagicMock(side_effect=_route)
    yield c
    c.close()


def _settings(tmp_path, **overrides):
    values = {"output_dir": tmp_path / "output", "api_delay_ms": 0}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestDownloadRepository:
    def test_writes_single_document(self, client, tmp_path):
        settings = _settings(tmp_path)

        result = download_repository(DownloadOptions("octo/demo"), settings, client=client, progress=False)

        output = tmp_path / "output" / "octo_demo_main.txt"
        assert result.output_file == str(output)
        assert result.repository == "octo/demo"
        assert result.branch == "main"
        assert result.total_files == 4
        assert result.total_size == len(FILES["README.md"]) + len(FILES["src/app.ts"])
        assert result.duration_ms >= 0

        text = output.read_text(encoding="utf-8")
        assert text.startswith("GitHub Repository: octo/demo\nBranch: main\nGenerated: ")
        assert "Total Files: 4\n" in text
        markers = re.findall(r"^=== (.+) ===$", text, flags=re.MULTILINE)
        assert markers == ["README.md", "src/app.ts", "src/app.test.ts", "src/broken.ts"]

    def test_failed_files_become_placeholders(self, client, tmp_path):
        result = download_repository(
            DownloadOptions("octo/demo"), _settings(tmp_path), client=client, progress=False
        )

        text = (tmp_path / "output" / "octo_demo_main.txt").read_text(encoding="utf-8")
        assert "=== src/broken.ts ===\nSize: 0 characters\n" in text
        assert "[Failed to download: HTTP 404: Not Found]" in text
        assert result.total_files == 4

    def test_filters_with_patterns(self, client, tmp_path):
        settings = _settings(tmp_path, include_patterns=["src/**"], exclude_patterns=["*.test.ts", "*broken*"])

        result = download_repository(DownloadOptions("octo/demo"), settings, client=client, progress=False)

        assert result.total_files == 1
        assert result.total_size == len(FILES["src/app.ts"])
        text = (tmp_path / "output" / "octo_demo_main.txt").read_text(encoding="utf-8")
        assert "=== src/app.ts ===" in text
        assert "README.md" not in text.split("=" * 80, 1)[1]

    def test_zero_matches_writes_nothing(self, client, tmp_path):
        settings = _settings(tmp_path, include_patterns=["*.rs"])

        result = download_repository(DownloadOptions("octo/demo"), settings, client=client, progress=False)

        assert result.total_files == 0
        assert result.total_size == 0
        assert result.output_file == ""
        assert not (tmp_path / "output").exists()
        client._client.get.assert_called_once_with(TREE_URL)

    def test_explicit_output_file(self, client, tmp_path):
        options = DownloadOptions("octo/demo", "main", "snapshot.txt")

        result = download_repository(options, _settings(tmp_path), client=client, progress=False)

        assert result.output_file == str(tmp_path / "output" / "snapshot.txt")

    def test_listing_failure_is_fatal(self, client, tmp_path):
        client._client.get = MagicMock(return_value=_mock_response(500, reason="Internal Server Error"))

        with pytest.raises(FetchError, match="HTTP 500"):
            download_repository(DownloadOptions("octo/demo"), _settings(tmp_path), client=client, progress=False)

        assert client._client.get.call_count == 3
        assert not (tmp_path / "output").exists()

    def test_write_failure_is_fatal(self, client, tmp_path):
        blocker = tmp_path / "output"
        blocker.write_text("not a directory")

        with pytest.raises(OSError):
            download_repository(DownloadOptions("octo/demo"), _settings(tmp_path), client=client, progress=False)

    def test_rate_limited_listing_recovers(self, client, tmp_path):
        limited = _mock_response(
            403, headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "0"}, reason="Forbidden"
        )
        responses = [limited] * 4

        def route(url):
            if url == TREE_URL and responses:
                return responses.pop()
            return _route(url)

        client._client.get = MagicMock(side_effect=route)

        result = download_repository(DownloadOptions("octo/demo"), _settings(tmp_path), client=client, progress=False)

        assert result.total_files == 4

    def test_builds_own_client_when_none_given(self, tmp_path):
        settings = _settings(tmp_path, github_token="tok", include_patterns=["*.rs"])

        with patch("github_repo_downloader.orchestrator.GitHubClient") as client_cls:
            client_cls.return_value.__enter__.return_value.fetch_with_retry.return_value.json.return_value = TREE
            result = download_repository(DownloadOptions("octo/demo"), settings, progress=False)

        client_cls.assert_called_once_with(token="tok")
        client_cls.return_value.__exit__.assert_called_once()
        assert result.total_files == 0
