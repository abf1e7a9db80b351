"""
どこで: `engine.core.validate`
何を: MultiPolygon の位相的妥当性（要素同士が面で重ならず、境界は点でのみ接する）を総当たりで検査する。
なぜ: エンジンはコレクション組立時にこの条件を検査しないため、組立直後に手動で確認する必要がある。

検査内容（全ての組 (i, j), j < i について）:
- `"2********"`: 内部同士が 2 次元で交わる（面の重なり）→ 違反
- `"****1****"`: 境界同士が 1 次元で交わる（辺の共有）→ 違反
- エンジンが答えられない（UNKNOWN）組も違反として扱う

列挙順は i 昇順（1 から）→ j 昇順（0 から i-1）で、最初の違反で打ち切る。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

from .tristate import Tristate

if TYPE_CHECKING:  # pragma: no cover
    from .context import EngineContext

logger = logging.getLogger(__name__)

INTERIOR_OVERLAP_PATTERN = "2********"
BOUNDARY_LINE_PATTERN = "****1****"

_PATTERNS = (INTERIOR_OVERLAP_PATTERN, BOUNDARY_LINE_PATTERN)


def find_multi_polygon_violation(
    ctx: "EngineContext", polygons: Sequence[Any]
) -> tuple[int, int] | None:
    """最初に違反した組 `(i, j)` を返す（違反なしは None）。

    Parameters
    ----------
    ctx : EngineContext
        relate 判定に使うエンジンコンテキスト。
    polygons : Sequence[Any]
        Polygon ジオメトリ列（組立前の要素列、または組立後の子要素列）。
    """
    n = len(polygons)
    for i in range(1, n):
        for j in range(i):
            for pattern in _PATTERNS:
                res = ctx.relate_pattern(polygons[i], polygons[j], pattern)
                if res is not Tristate.FALSE:
                    logger.debug(
                        "multipolygon violation: pair=(%d, %d) pattern=%s result=%s",
                        i,
                        j,
                        pattern,
                        res.name,
                    )
                    return (i, j)
    return None


def is_valid_multi_polygon(ctx: "EngineContext", polygons: Sequence[Any]) -> bool:
    return find_multi_polygon_violation(ctx, polygons) is None


__all__ = [
    "INTERIOR_OVERLAP_PATTERN",
    "BOUNDARY_LINE_PATTERN",
    "find_multi_polygon_violation",
    "is_valid_multi_polygon",
]
