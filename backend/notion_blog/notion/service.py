# backend/notion_blog/notion/service.py

"""
Notion クライアントと内部スキーマをつなぐサービス層。

- データベース ID → データソース ID の解決
- 公開済み記事の取得
- ページオブジェクト → FlattenedPost への変換
- 各記事の本文ブロック取得とマークアップ変換（記事間は並行実行）

方針として、サイトのビルドを止めないことを優先する。
失敗した部分は空（記事なし / フィールドなし / 本文なし）に倒す。
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from .blocks import render_blocks
from .client import (
    NoDataSourceError,
    NotionClient,
    NotionClientError,
    NotionRateLimitError,
)
from .config import NotionConfig
from .flatten import flatten_post
from .schemas import FlattenedPost

logger = logging.getLogger(__name__)


class NotionPostService:
    """
    NotionClient を利用して、テンプレート層に渡す記事一覧を組み立てるサービス。

    `async with` で使うと、終了時にクライアントの接続を閉じる。
    """

    def __init__(
        self,
        client: Optional[NotionClient] = None,
        *,
        config: Optional[NotionConfig] = None,
    ) -> None:
        self.client = client or NotionClient(config)

    async def __aenter__(self) -> "NotionPostService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.client.aclose()

    async def resolve_data_source_id(self, database_id: Optional[str] = None) -> str:
        """
        データベースのメタデータから先頭のデータソース ID を返す。

        :raises NoDataSourceError: data_sources が無い / 空の場合。
        """
        database_id = database_id or self.client.config.database_id
        database = await self.client.retrieve_database(database_id)

        data_sources = database.get("data_sources")
        if not isinstance(data_sources, list) or not data_sources:
            raise NoDataSourceError("No data sources found in database")

        first = data_sources[0]
        data_source_id = first.get("id") if isinstance(first, dict) else None
        if not data_source_id:
            raise NoDataSourceError("No data sources found in database")

        return data_source_id

    async def query_published_posts(self, data_source_id: str) -> List[Dict[str, Any]]:
        """
        Status == Published の記事を Published 昇順で取得する。

        取得に失敗した場合は例外を投げずに空リストを返す。
        """
        payload = self.client.config.query.to_payload()

        try:
            return await self.client.query_data_source(data_source_id, payload)
        except NotionClientError as exc:
            logger.error("Error fetching Notion database: %s", exc)
            return []

    def flatten_posts(self, raw_posts: List[Dict[str, Any]]) -> List[FlattenedPost]:
        """
        ページオブジェクトを FlattenedPost に変換する。形式が壊れている記事は捨てる。
        """
        posts: List[FlattenedPost] = []
        for raw in raw_posts:
            try:
                posts.append(flatten_post(raw))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping malformed post: %s", exc)
        return posts

    async def render_post_body(self, block_id: str) -> str:
        """
        ページ直下のブロックを取得してマークアップ文字列に変換する。

        ブロック取得・変換に失敗した記事は本文を空にし、他の記事には影響させない。
        """
        try:
            blocks = await self.client.list_block_children(block_id)
            return render_blocks(blocks)
        except NotionRateLimitError as exc:
            logger.warning(
                "Rate limited while fetching blocks for %s (Retry-After=%s); body left empty. "
                "Lower NOTION_MAX_CONCURRENCY if this repeats.",
                block_id,
                exc.retry_after,
            )
        except Exception as exc:  # noqa: BLE001 - 1 記事の失敗で他の記事を落とさない
            logger.warning("Error fetching blocks for %s: %s", block_id, exc)
        return ""

    async def _render_bodies(self, posts: List[FlattenedPost]) -> List[str]:
        """
        全記事の本文を並行して組み立てる。同時実行数は max_concurrency までに抑える。
        """
        semaphore = asyncio.Semaphore(max(self.client.config.max_concurrency, 1))

        async def _limited(block_id: str) -> str:
            async with semaphore:
                return await self.render_post_body(block_id)

        # gather は引数の順序で結果を返すので、クエリのソート順が保たれる
        return await asyncio.gather(*(_limited(post.id) for post in posts))

    async def build_posts(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        記事一覧を組み立てて {"posts": [...]} の形で返す。

        データソース解決やクエリで失敗した場合は {"posts": []} を返し、例外は投げない。
        """
        try:
            data_source_id = await self.resolve_data_source_id()
            raw_posts = await self.query_published_posts(data_source_id)
            posts = self.flatten_posts(raw_posts)

            bodies = await self._render_bodies(posts)
        except Exception as exc:  # noqa: BLE001 - ビルドを止めない
            logger.error("Error in notion data module: %s", exc)
            return {"posts": []}

        results = [
            post.model_copy(update={"block": body}).to_context()
            for post, body in zip(posts, bodies)
        ]
        _warn_duplicate_slugs(results)

        logger.info("Built %s posts from Notion", len(results))
        return {"posts": results}


def _warn_duplicate_slugs(posts: List[Dict[str, Any]]) -> None:
    counts = Counter(post["slug"] for post in posts if post.get("slug"))
    for slug, count in counts.items():
        if count > 1:
            logger.warning("Slug %r is shared by %s posts", slug, count)


async def build_posts(config: Optional[NotionConfig] = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    クライアントの生成から後始末までを含めて記事一覧を組み立てる。
    """
    async with NotionPostService(config=config) as service:
        return await service.build_posts()


def build_posts_sync(config: Optional[NotionConfig] = None) -> Dict[str, List[Dict[str, Any]]]:
    """CLI などの同期コードから呼ぶためのラッパー。"""
    return asyncio.run(build_posts(config))
