# backend/notion_blog/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .cache import ResponseCache, make_cache_key
from .config import NotionConfig, get_notion_config

logger = logging.getLogger(__name__)


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""


class NotionAuthError(NotionClientError):
    """認証・権限関連のエラー。"""


class NotionAPIError(NotionClientError):
    """その他 Notion API 呼び出し時のエラー。"""


class NotionRateLimitError(NotionAPIError):
    """レート制限（429）に達した場合のエラー。"""

    def __init__(self, retry_after: Optional[str] = None) -> None:
        super().__init__(f"Notion API rate limited (429). Retry-After={retry_after}")
        self.retry_after = retry_after


class NoDataSourceError(NotionClientError):
    """データベースにデータソースが 1 件も無い場合のエラー。"""


class NotionClient:
    """
    Notion API の薄い非同期ラッパークライアント。

    - データベースのメタデータ取得
    - データソースの query
    - ブロック子要素の取得（ページネーション追従）

    GET / POST のレスポンスは ResponseCache に保存され、鮮度期間内は再利用される。
    """

    def __init__(
        self,
        config: Optional[NotionConfig] = None,
        *,
        cache: Optional[ResponseCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or get_notion_config()
        self._cache = cache or ResponseCache(
            self.config.cache_dir,
            self.config.cache_duration_seconds,
        )
        self._http = httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _build_headers(self) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise NotionAuthError("Unauthorized. Check NOTION_TOKEN.")
        if response.status_code == 403:
            raise NotionAuthError("Forbidden. Check Notion integration permissions.")
        if response.status_code == 429:
            raise NotionRateLimitError(response.headers.get("Retry-After"))
        if response.status_code >= 400:
            raise NotionAPIError(
                f"Notion API error: {response.status_code} {response.text}"
            )

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        1 リクエスト分を実行して JSON オブジェクトを返す。キャッシュがあればそちらを返す。
        """
        cache_url = str(httpx.URL(url, params=params)) if params else url
        key = make_cache_key(method, cache_url, body)
        cached = await self._cache.aget(key)
        if cached is not None:
            logger.debug("Cache hit: %s %s", method, url)
            return cached

        try:
            response = await self._http.request(
                method,
                url,
                headers=self._build_headers(),
                json=body,
                params=params,
            )
        except httpx.RequestError as exc:
            raise NotionClientError(f"Failed to call Notion API: {exc}") from exc

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise NotionAPIError("Unexpected Notion API response: body is not JSON.") from exc

        if not isinstance(data, dict):
            raise NotionAPIError("Unexpected Notion API response: body is not an object.")

        await self._cache.aset(key, data)
        return data

    async def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        """
        データベースのメタデータを取得する。
        """
        url = f"{self.config.api_base_url}/databases/{database_id}"
        return await self._request_json("GET", url)

    async def query_data_source(
        self,
        data_source_id: str,
        payload: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        """
        データソースに対して query を発行し、results（生のページオブジェクト）を返す。

        1 リクエストのみで、next_cursor は追わない。
        """
        url = f"{self.config.api_base_url}/data_sources/{data_source_id}/query"
        data = await self._request_json("POST", url, body=payload)

        results = data.get("results", [])
        if not isinstance(results, list):
            raise NotionAPIError("Unexpected Notion API response format: 'results' is not a list.")

        return results

    async def list_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        """
        ブロックの直下の子ブロックをすべて取得する。

        has_more / next_cursor を max_block_pages ページまで追従する。
        """
        url = f"{self.config.api_base_url}/blocks/{block_id}/children"
        blocks: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        for _ in range(max(self.config.max_block_pages, 1)):
            params = {"start_cursor": cursor} if cursor else None
            data = await self._request_json("GET", url, params=params)

            results = data.get("results") or []
            if not isinstance(results, list):
                raise NotionAPIError("Unexpected Notion API response format: 'results' is not a list.")
            blocks.extend(results)

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return blocks

        logger.warning(
            "Block %s has more than %s pages of children; trailing blocks were skipped.",
            block_id,
            self.config.max_block_pages,
        )
        return blocks
