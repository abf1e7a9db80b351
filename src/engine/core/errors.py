"""
どこで: `engine.core.errors`
何を: エンジン層（ハンドル寿命・所有権・コレクション組立）の例外。
なぜ: 問い合わせ系プリミティブは失敗値を返すが、寿命/所有権の誤用は即座に例外で知らせるため。
"""

from __future__ import annotations


class EngineError(RuntimeError):
    """エンジン層の基底例外。"""


class HandleReleasedError(EngineError):
    """解放済みハンドルへのアクセス/二重解放。"""


class OwnershipError(EngineError):
    """他のコレクションが所有しているハンドルを単独で解放/再利用しようとした。"""


class AssemblyError(EngineError):
    """エンジンがコレクションを組み立てられなかった。

    `__cause__` に元の例外（GEOSException など）を保持する。
    """


__all__ = ["EngineError", "HandleReleasedError", "OwnershipError", "AssemblyError"]
