"""
どこで: `common` の型定義。
何を: 座標/点列の軽量エイリアス（組込みジェネリックで記述）。
なぜ: 依存の少ない場所に配置して循環と分散定義を避けるため。
"""

from typing import Sequence

CoordLike = Sequence[float]

__all__ = ["CoordLike"]
