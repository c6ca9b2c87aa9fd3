# backend/notion_blog/notion/extract.py

"""
Notion のネストした JSON から値を取り出すアクセサ群と、変換結果の型。

各アクセサは値が見つからない場合に空文字列を返す。
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Conversion:
    """
    プロパティ / ブロック 1 件分の変換結果。

    value が None のものは「スキップ」。error があれば変換中の例外を保持する。
    """

    value: Optional[str] = None
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, value: str) -> "Conversion":
        return cls(value=value)

    @classmethod
    def skip(cls, error: Optional[Exception] = None) -> "Conversion":
        return cls(value=None, error=error)

    @property
    def skipped(self) -> bool:
        return self.value is None


def first_text_content(runs: Any) -> str:
    """
    テキストラン配列の先頭要素から text.content を取り出す。
    text が無い場合は plain_text を使う。
    """
    if not isinstance(runs, list) or not runs:
        return ""

    first = runs[0]
    if not isinstance(first, dict):
        return ""

    text = first.get("text")
    if isinstance(text, dict):
        content = text.get("content")
        if isinstance(content, str) and content:
            return content

    plain = first.get("plain_text")
    if isinstance(plain, str):
        return plain

    return ""


def file_url(obj: Any) -> str:
    """
    Notion のファイルオブジェクト（file / external のどちらか）から URL を取り出す。
    """
    if not isinstance(obj, dict):
        return ""

    for key in ("file", "external"):
        ref = obj.get(key)
        if isinstance(ref, dict):
            url = ref.get("url")
            if isinstance(url, str) and url:
                return url

    return ""


def first_file_url(files: Any) -> str:
    if not isinstance(files, list) or not files:
        return ""
    return file_url(files[0])


def select_name(option: Any) -> str:
    if isinstance(option, dict):
        name = option.get("name")
        if isinstance(name, str):
            return name
    return ""


def as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)
