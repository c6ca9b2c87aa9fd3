# backend/notion_blog/notion/cache.py

"""
Notion API レスポンスのディスクキャッシュ。

- キーは (HTTP メソッド, URL, リクエストボディ) の SHA-256
- 1 キー 1 ファイルの JSON として保存し、保存時刻から duration 秒だけ有効
- 壊れたファイル・期限切れ・オブジェクト以外の値のエントリは無視して再取得させる
- 非同期コードからは aget / aset を使い、ファイル I/O をスレッドに逃がす
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def make_cache_key(method: str, url: str, body: Optional[Any] = None) -> str:
    payload = json.dumps(
        {"method": method.upper(), "url": url, "body": body},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


class ResponseCache:
    """
    JSON レスポンスを鮮度付きで保持するキャッシュ。

    duration_seconds <= 0 の場合は何も読み書きしない（無効化）。
    """

    def __init__(
        self,
        directory: str | Path,
        duration_seconds: int,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = Path(directory)
        self._duration = duration_seconds
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self._duration > 0

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        """有効なエントリがあればその JSON 値を、なければ None を返す。"""
        if not self.enabled:
            return None

        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
            cached_at = float(entry["cached_at"])
            value = entry["value"]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

        if not isinstance(value, dict):
            logger.warning(
                "Ignoring cache entry %s: value is %s, not an object",
                path,
                type(value).__name__,
            )
            return None

        if self._clock() - cached_at > self._duration:
            logger.debug("Cache entry expired: %s", path)
            return None

        return value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return

        entry = {"cached_at": self._clock(), "value": value}
        path = self._path_for(key)
        tmp_path = path.with_suffix(".tmp")

        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(entry, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            # 書き込めなくてもビルドは続行する
            logger.warning("Failed to write cache entry %s: %s", path, exc)

    async def aget(self, key: str) -> Optional[Any]:
        """get() をスレッドで実行し、イベントループを塞がない。"""
        if not self.enabled:
            return None
        return await asyncio.to_thread(self.get, key)

    async def aset(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        await asyncio.to_thread(self.set, key, value)
