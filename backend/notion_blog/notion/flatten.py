# backend/notion_blog/notion/flatten.py

"""
Notion のページオブジェクト → FlattenedPost への変換。

プロパティ 1 件の変換失敗は警告ログを出してそのプロパティを落とすだけで、
記事全体は失敗させない。
"""

import logging
import re
import unicodedata
from typing import Any, Dict, Mapping

from .extract import (
    Conversion,
    as_optional_str,
    first_file_url,
    first_text_content,
    select_name,
)
from .schemas import TEXT_PROPERTY_KINDS, FlattenedPost, PropertyKind, PropertyValue

logger = logging.getLogger(__name__)

_COMBINING_MARKS_RE = re.compile(r"[\u0300-\u036f]")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\-]+", re.ASCII)
_MULTI_HYPHEN_RE = re.compile(r"--+")


def slugify(text: Any) -> str:
    """
    タイトルを URL 用のスラッグに変換する。

    小文字化・前後空白除去 → 濁点などの結合文字を除去 → 空白を "-" に →
    "&" を "-and-" に → 英数字・"_"・"-" 以外を削除 → 連続する "-" を 1 つに。
    空文字列 / None は "" を返す。
    """
    if not text:
        return ""

    slug = str(text).lower().strip()
    slug = unicodedata.normalize("NFD", slug)
    slug = _COMBINING_MARKS_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = slug.replace("&", "-and-")
    slug = _NON_WORD_RE.sub("", slug)
    slug = _MULTI_HYPHEN_RE.sub("-", slug)
    return slug


def convert_property(raw: Any) -> Conversion:
    """
    プロパティ 1 件を表示用文字列に変換する。

    値が空のもの・対象外の種別はスキップ扱いになる。
    """
    try:
        prop = PropertyValue.from_raw(raw)
        if not prop.has_value():
            return Conversion.skip()

        if prop.kind in TEXT_PROPERTY_KINDS:
            return Conversion.ok(first_text_content(prop.payload))
        if prop.kind == PropertyKind.FILES:
            return Conversion.ok(first_file_url(prop.payload))
        if prop.kind == PropertyKind.SELECT:
            return Conversion.ok(select_name(prop.payload))

        # PropertyKind.OTHER
        return Conversion.skip()
    except Exception as exc:  # noqa: BLE001 - 1 プロパティの失敗で記事を落とさない
        return Conversion.skip(exc)


def flatten_properties(properties: Any) -> Dict[str, str]:
    """
    プロパティ名 → 表示用文字列 の dict を作る。
    """
    if not isinstance(properties, Mapping):
        if properties is not None:
            logger.warning(
                "Ignoring properties of unexpected type: %s", type(properties).__name__
            )
        return {}

    flattened: Dict[str, str] = {}
    for name, raw in properties.items():
        result = convert_property(raw)
        if result.error is not None:
            logger.warning("Error mapping property %s: %s", name, result.error)
        if result.skipped:
            continue
        flattened[str(name)] = result.value

    return flattened


def flatten_post(raw_post: Mapping[str, Any]) -> FlattenedPost:
    """
    クエリ結果のページオブジェクト 1 件を FlattenedPost に変換する。

    本文（block）はここでは空のまま。ブロック取得後に埋める。
    """
    if not isinstance(raw_post, Mapping):
        raise TypeError(f"post must be an object, got {type(raw_post).__name__}")

    properties = flatten_properties(raw_post.get("properties"))

    return FlattenedPost(
        id=as_optional_str(raw_post.get("id")) or "",
        created=as_optional_str(raw_post.get("created_time")),
        url=as_optional_str(raw_post.get("url")),
        slug=slugify(properties.get("Title")),
        properties=properties,
    )
