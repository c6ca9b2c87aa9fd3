# backend/tests/conftest.py
"""
Pytest configuration for the Notion blog data tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import notion_blog.*` works correctly in tests.
- Ensures required environment variables for tests are set
  with safe dummy values (e.g., NOTION_TOKEN, NOTION_DATABASE_ID).
- Provides helpers to build a NotionClient backed by httpx.MockTransport.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set dummy environment variables required for tests.

    These values are only for local testing and do NOT contain real secrets.
    """
    os.environ.setdefault("NOTION_TOKEN", "dummy-notion-token-for-tests")
    os.environ.setdefault("NOTION_DATABASE_ID", "dummy-notion-db-id-for-tests")
    # テスト中にディスクキャッシュを作らない
    os.environ.setdefault("NOTION_CACHE_DURATION", "0")


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()

import httpx  # noqa: E402

from notion_blog.notion.cache import ResponseCache  # noqa: E402
from notion_blog.notion.client import NotionClient  # noqa: E402
from notion_blog.notion.config import NotionConfig, get_notion_config  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_config_cache():
    get_notion_config.cache_clear()
    yield
    get_notion_config.cache_clear()


@pytest.fixture
def notion_config(tmp_path) -> NotionConfig:
    return NotionConfig(
        api_key="dummy-key",
        database_id="db-1",
        api_base_url="https://api.notion.test/v1",
        cache_dir=str(tmp_path / "cache"),
        cache_duration_seconds=0,
    )


Handler = Callable[[httpx.Request], httpx.Response]


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(data).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


class RecordingHandler:
    """
    パス → レスポンス生成関数 の対応表でリクエストをさばき、受けたリクエストを記録する。
    """

    def __init__(self, routes: Dict[str, Handler]) -> None:
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return json_response({"message": "not found"}, status_code=404)
        return handler(request)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def make_client(notion_config):
    def _make(
        handler: Handler,
        *,
        config: NotionConfig = None,
        cache: ResponseCache = None,
    ) -> NotionClient:
        return NotionClient(
            config or notion_config,
            cache=cache,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def respond():
    return json_response


@pytest.fixture
def recording_handler():
    return RecordingHandler
