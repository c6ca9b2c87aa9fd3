# backend/notion_blog/notion/blocks.py

"""
Notion のブロック → 軽量マークアップ（Markdown 風）への変換。

1 ブロック = 1 行。変換に失敗したブロックや空行は捨てる。
"""

import logging
from typing import Any, Dict, Iterable, List

from .extract import Conversion, file_url, first_text_content
from .schemas import Block, BlockKind

logger = logging.getLogger(__name__)

IMAGE_ALT_TEXT = "post block related"

_PREFIXES: Dict[BlockKind, str] = {
    BlockKind.HEADING_1: "#",
    BlockKind.HEADING_2: "##",
    BlockKind.HEADING_3: "###",
    BlockKind.BULLETED_LIST_ITEM: "- ",
    BlockKind.PARAGRAPH: "",
    BlockKind.IMAGE: "",
    BlockKind.OTHER: "",
}


def _block_text(block: Block) -> str:
    content = block.content or {}
    # 現行 API は rich_text、古いレスポンスは text
    runs = content.get("rich_text") or content.get("text")
    return first_text_content(runs)


def convert_block(raw: Any) -> Conversion:
    """
    ブロック 1 件を 1 行のマークアップに変換する。

    prefix と本文の両方がある場合だけ "<prefix> <本文>"、それ以外は本文のみ。
    本文が空ならスキップ。
    """
    try:
        block = Block.from_raw(raw)
        if block is None or block.content is None:
            return Conversion.skip()

        prefix = _PREFIXES[block.kind]
        if block.kind == BlockKind.IMAGE:
            text = f"![{IMAGE_ALT_TEXT}]({file_url(block.content)})"
        else:
            text = _block_text(block)

        line = f"{prefix} {text}" if prefix and text else text
        if not line:
            return Conversion.skip()
        return Conversion.ok(line)
    except Exception as exc:  # noqa: BLE001 - 1 ブロックの失敗で本文全体を落とさない
        return Conversion.skip(exc)


def render_blocks(blocks: Iterable[Any]) -> str:
    """
    ブロックの列を改行区切りのマークアップ文字列にする。
    """
    lines: List[str] = []
    for raw in blocks:
        result = convert_block(raw)
        if result.error is not None:
            logger.warning("Error mapping block: %s", result.error)
        if result.skipped:
            continue
        lines.append(result.value)

    return "\n".join(lines)
