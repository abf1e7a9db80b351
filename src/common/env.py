"""
どこで: `common.env`
何を: 環境変数の軽量パースヘルパを提供（bool / 文字列の選択肢）。
なぜ: `common.settings` 以外に `os.getenv` と境界ガードが散在しないようにするため。
"""

from __future__ import annotations

import os
from typing import Iterable, Optional

_TRUE_WORDS = frozenset({"true", "t", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"false", "f", "no", "n", "off"})


def env_bool(name: str, default: bool = False) -> bool:
    """真偽環境変数を取得（0/1, true/false, yes/no, on/off を許容）。

    未設定・解釈不能な値は `default` を返す。
    """
    raw = os.getenv(name)
    if raw is None:
        return bool(default)
    s = raw.strip().lower()
    try:
        # 数値優先
        return int(s) != 0
    except ValueError:
        pass
    if s in _TRUE_WORDS:
        return True
    if s in _FALSE_WORDS:
        return False
    return bool(default)


def env_choice(
    name: str,
    default: Optional[str] = None,
    *,
    choices: Iterable[str] | None = None,
) -> Optional[str]:
    """文字列環境変数を取得（前後空白を除去し大文字化）。

    Parameters
    ----------
    name : str
        環境変数名。
    default : Optional[str]
        未設定/空文字/候補外のときに返す値。
    choices : Iterable[str] | None
        許容する値（大文字で比較）。`None` なら任意の文字列を許容。

    Returns
    -------
    Optional[str]
        正規化済みの値、または `default`。
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip().upper()
    if not s:
        return default
    if choices is not None and s not in {c.upper() for c in choices}:
        return default
    return s


__all__ = ["env_bool", "env_choice"]
