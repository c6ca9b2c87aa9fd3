# backend/notion_blog/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

from notion_blog.utils.config import get_env, get_env_int, parse_duration

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.notion.com/v1"
# data_sources エンドポイントが使えるのはこのバージョン以降
DEFAULT_API_VERSION = "2025-09-03"
DEFAULT_CACHE_DURATION = "1d"


@dataclass(frozen=True)
class QueryOptions:
    """公開済み記事を取得するクエリのフィルタ・ソート条件。"""

    status_field: str = "Status"
    status_value: str = "Published"
    sort_field: str = "Published"
    sort_direction: str = "ascending"

    def to_payload(self) -> dict:
        return {
            "filter": {
                "property": self.status_field,
                "select": {"equals": self.status_value},
            },
            "sorts": [
                {
                    "property": self.sort_field,
                    "direction": self.sort_direction,
                }
            ],
        }


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    api_key: str
    database_id: str
    api_base_url: str = DEFAULT_API_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: int = 10
    cache_dir: str = ".cache/notion"
    cache_duration_seconds: int = 24 * 60 * 60
    max_block_pages: int = 20
    max_concurrency: int = 3
    query: QueryOptions = QueryOptions()


def _get_cache_duration() -> int:
    raw = get_env("NOTION_CACHE_DURATION", default=DEFAULT_CACHE_DURATION, required=False)
    try:
        return parse_duration(raw)
    except ValueError:
        logger.warning(
            "Invalid NOTION_CACHE_DURATION=%r; using %s", raw, DEFAULT_CACHE_DURATION
        )
        return parse_duration(DEFAULT_CACHE_DURATION)


def _get_sort_direction() -> str:
    direction = get_env(
        "NOTION_SORT_DIRECTION", default="ascending", required=False
    ).lower()
    if direction not in ("ascending", "descending"):
        logger.warning("Invalid NOTION_SORT_DIRECTION=%r; using ascending", direction)
        return "ascending"
    return direction


@lru_cache()
def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    必須:
      - NOTION_TOKEN       (別名: NOTION_API_KEY)
      - NOTION_DATABASE_ID (別名: DATABASE_ID)

    任意:
      - NOTION_API_BASE_URL    (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION     (デフォルト: 2025-09-03)
      - NOTION_TIMEOUT_SECONDS (デフォルト: 10)
      - NOTION_CACHE_DIR       (デフォルト: .cache/notion)
      - NOTION_CACHE_DURATION  (デフォルト: 1d、0 でキャッシュ無効)
      - NOTION_MAX_BLOCK_PAGES (デフォルト: 20)
      - NOTION_MAX_CONCURRENCY (デフォルト: 3、ブロック取得の同時実行数)
      - NOTION_STATUS_FIELD / NOTION_STATUS_VALUE
      - NOTION_SORT_FIELD / NOTION_SORT_DIRECTION
    """
    api_key = get_env(("NOTION_TOKEN", "NOTION_API_KEY"))
    database_id = get_env(("NOTION_DATABASE_ID", "DATABASE_ID"))

    query = QueryOptions(
        status_field=get_env("NOTION_STATUS_FIELD", default="Status", required=False),
        status_value=get_env("NOTION_STATUS_VALUE", default="Published", required=False),
        sort_field=get_env("NOTION_SORT_FIELD", default="Published", required=False),
        sort_direction=_get_sort_direction(),
    )

    return NotionConfig(
        api_key=api_key,
        database_id=database_id,
        api_base_url=get_env(
            "NOTION_API_BASE_URL",
            default=DEFAULT_API_BASE_URL,
            required=False,
        ),
        api_version=get_env(
            "NOTION_API_VERSION",
            default=DEFAULT_API_VERSION,
            required=False,
        ),
        timeout_seconds=get_env_int("NOTION_TIMEOUT_SECONDS", default=10),
        cache_dir=get_env("NOTION_CACHE_DIR", default=".cache/notion", required=False),
        cache_duration_seconds=_get_cache_duration(),
        max_block_pages=get_env_int("NOTION_MAX_BLOCK_PAGES", default=20),
        max_concurrency=get_env_int("NOTION_MAX_CONCURRENCY", default=3),
        query=query,
    )
