# backend/notion_blog/notion/schemas.py

"""
Notion から取得したデータを内部で扱うためのスキーマ定義。

- PropertyValue: ページプロパティ（type タグ付きの値）
- Block: ページ本文のブロック（type タグ付きの値）
- FlattenedPost: テンプレート側に渡す 1 記事分のフラットなレコード
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field


class PropertyKind(str, Enum):
    """フラット化の対象として扱うプロパティ種別。それ以外は OTHER。"""

    RICH_TEXT = "rich_text"
    TEXT = "text"
    TITLE = "title"
    FILES = "files"
    SELECT = "select"
    OTHER = "other"


# payload が「テキストランの配列」である種別
TEXT_PROPERTY_KINDS = (PropertyKind.RICH_TEXT, PropertyKind.TEXT, PropertyKind.TITLE)
# payload が配列である種別
ARRAY_PROPERTY_KINDS = TEXT_PROPERTY_KINDS + (PropertyKind.FILES,)


class PropertyValue(BaseModel):
    """
    Notion のプロパティ 1 件を表すタグ付き共用体。

    type タグが未知の場合は kind=OTHER とし、例外にはしない。
    """

    kind: PropertyKind = Field(..., description="プロパティ種別")
    type_name: Optional[str] = Field(None, description="Notion 側の元の type 文字列")
    payload: Any = Field(None, description="type 名のキー配下に入っている値")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "PropertyValue":
        if not isinstance(raw, Mapping):
            raise TypeError(f"property must be an object, got {type(raw).__name__}")

        type_name = raw.get("type")
        try:
            kind = PropertyKind(type_name)
        except ValueError:
            kind = PropertyKind.OTHER

        payload = raw.get(type_name) if isinstance(type_name, str) else None
        return cls(kind=kind, type_name=type_name, payload=payload)

    def has_value(self) -> bool:
        """
        フラット化の対象にするかどうか。

        - select: payload が null でない
        - 配列 payload の種別: 空でない配列
        """
        if self.kind == PropertyKind.SELECT:
            return self.payload is not None
        if self.kind in ARRAY_PROPERTY_KINDS:
            return isinstance(self.payload, list) and len(self.payload) > 0
        return False


class BlockKind(str, Enum):
    """マークアップ変換で区別するブロック種別。それ以外は OTHER。"""

    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    PARAGRAPH = "paragraph"
    IMAGE = "image"
    OTHER = "other"


class Block(BaseModel):
    """Notion のブロック 1 件を表すタグ付き共用体。"""

    kind: BlockKind
    type_name: Optional[str] = None
    content: Optional[Dict[str, Any]] = Field(
        None,
        description="type 名のキー配下の値。無い・オブジェクトでない場合は None。",
    )

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]]) -> Optional["Block"]:
        """type を持たない（または raw 自体が無い）場合は None を返す。"""
        if not isinstance(raw, Mapping):
            return None

        type_name = raw.get("type")
        if not isinstance(type_name, str) or not type_name:
            return None

        try:
            kind = BlockKind(type_name)
        except ValueError:
            kind = BlockKind.OTHER

        content = raw.get(type_name)
        if not isinstance(content, dict):
            content = None

        return cls(kind=kind, type_name=type_name, content=content)


class FlattenedPost(BaseModel):
    """
    テンプレート側に渡す 1 記事分のレコード。

    properties の中身（フィールド集合）はデータベースの定義次第で変わる。
    slug はタイトルから導出するだけで、一意性は保証しない。
    """

    id: str = Field(..., description="Notion ページ ID")
    created: Optional[str] = Field(None, description="ページ作成日時（created_time）")
    url: Optional[str] = Field(None, description="Notion 上のページ URL")
    slug: str = Field("", description="Title から導出した URL 用スラッグ")
    properties: Dict[str, str] = Field(
        default_factory=dict,
        description="プロパティ名 → 表示用文字列",
    )
    block: str = Field("", description="本文ブロックを変換したマークアップ")

    def to_context(self) -> Dict[str, Any]:
        """
        テンプレートが参照するフラットな dict に変換する。

        プロパティは基本フィールドの後に展開し、block は常に最後に置く。
        """
        context: Dict[str, Any] = {
            "id": self.id,
            "created": self.created,
            "url": self.url,
            "slug": self.slug,
        }
        context.update(self.properties)
        context["block"] = self.block
        return context


class PostsResponse(BaseModel):
    """
    /posts のレスポンス全体を表現するモデル。
    """

    posts: List[Dict[str, Any]]
    count: int
