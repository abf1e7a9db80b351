"""
どこで: `features.errors`
何を: コレクション構築の失敗と、判定不能な等価比較を表す例外。
なぜ: 呼び出し側が「要素が不正」と「並び（位相）が不正」を区別でき、最初の不正入力を特定できるようにするため。
"""

from __future__ import annotations


class CollectionConstructionError(ValueError):
    """コレクション構築の失敗（構築は全か無か。失敗時に部分的なコレクションは残らない）。"""

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class InvalidElementError(CollectionConstructionError):
    """要素をエンジンのジオメトリへ変換できない（型違い・所有済み・解放済みなど）。

    `index` は最初に失敗した要素の位置（変換関数単体から投げられた場合は None）。
    """


class InvalidArrangementError(CollectionConstructionError):
    """要素は正しいが、組立または MultiPolygon の位相条件に失敗した。

    `pair` は違反した要素の組 `(i, j)`（分かる場合のみ）。
    """

    def __init__(self, message: str, *, pair: tuple[int, int] | None = None) -> None:
        super().__init__(message, index=pair[0] if pair is not None else None)
        self.pair = pair


class IndeterminateComparisonError(ValueError):
    """`==` で比較したが、エンジンが等価性を判定できなかった（`rep_equals` は UNKNOWN）。"""


__all__ = [
    "CollectionConstructionError",
    "InvalidElementError",
    "InvalidArrangementError",
    "IndeterminateComparisonError",
]
