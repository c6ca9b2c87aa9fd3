# backend/notion_blog/utils/config.py

"""
環境変数読み取り用のユーティリティ。
Notion 設定だけでなく、CLI / API からも共通利用する。
"""

import logging
import os
import re
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)


class EnvVarMissingError(RuntimeError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: Union[str, Iterable[str]],
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> Optional[str]:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名。別名を許す場合は優先順に並べたタプルを渡す
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    names = (name,) if isinstance(name, str) else tuple(name)

    for candidate in names:
        value = os.getenv(candidate)
        if value is not None and value != "":
            return value

    if required:
        raise EnvVarMissingError(names[0])
    return default


def get_env_int(name: str, default: int) -> int:
    """
    整数の環境変数を取得するユーティリティ。

    - 未設定 or パース不能の場合は default を返す。
    """
    raw = get_env(name, default=str(default), required=False)
    if raw is None:
        return default

    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r; using default %s", name, raw, default)
        return default


_DURATION_UNITS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")


def parse_duration(value: str) -> int:
    """
    "1d" / "12h" / "30m" / "45s" / "2w" 形式の期間を秒数に変換する。
    単位なしの数値は秒として扱う。
    """
    match = _DURATION_RE.match(value or "")
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit or "s"]
