"""
どこで: `api.factories`
何を: 設定（環境変数）に従う既定 Factory の取得。
なぜ: 利用者が Factory の引数を意識せず、プロセス共通のエンジンコンテキストで生成できるようにするため。

Notes
-----
- `default_factory()` は初回呼び出し時に `common.settings` の値で Factory を作り、以降は同じものを返す。
- 設定を変更した後は `reset_default_factory()` で作り直す（主にテスト用）。
- 引数を渡した場合は既定値を使わず、その都度新しい Factory を返す。
"""

from __future__ import annotations

import logging

from features.factory import Factory

logger = logging.getLogger(__name__)

_default: Factory | None = None


def default_factory(**overrides: bool) -> Factory:
    """既定の Factory を返す（`overrides` 指定時は新規生成）。"""
    global _default
    if overrides:
        return Factory(**overrides)
    if _default is None:
        _default = Factory()
        logger.debug("default factory created: %r", _default)
    return _default


def reset_default_factory() -> None:
    global _default
    _default = None


__all__ = ["default_factory", "reset_default_factory"]
