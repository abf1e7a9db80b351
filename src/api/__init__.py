"""
どこで: `api` 入口（高レベル公開 API）。
何を: Factory・ジオメトリ型・三値結果型・例外・ロギング初期化を再輸出。
なぜ: 利用者が単一名前空間からコレクションの構築→要素アクセス→比較まで完結できるようにするため。

Usage:
    from api import default_factory, Equality

    f = default_factory()
    a = f.polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    b = f.polygon([(2, 0), (3, 0), (3, 1), (2, 1)])
    mp = f.multi_polygon([a, b])

    len(mp)            # 2
    mp[-1]             # b の複製
    mp.area()          # 2.0
    mp.rep_equals(f.multi_polygon([a, b])) is Equality.EQUAL
"""

from common.logging import setup_default_logging
from engine.core.context import EngineContext
from engine.core.errors import EngineError, HandleReleasedError, OwnershipError
from engine.core.handle import GeometryHandle
from engine.core.kinds import GeometryKind
from engine.core.tristate import Equality, Tristate
from features import (
    CollectionConstructionError,
    Factory,
    Feature,
    GeometryCollection,
    IndeterminateComparisonError,
    InvalidArrangementError,
    InvalidElementError,
    Line,
    LinearRing,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)

from .factories import default_factory, reset_default_factory

__all__ = [
    # 生成
    "Factory",
    "default_factory",
    "reset_default_factory",
    "EngineContext",
    "GeometryHandle",
    # ジオメトリ型
    "Feature",
    "Point",
    "LineString",
    "Line",
    "LinearRing",
    "Polygon",
    "GeometryCollection",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "GeometryKind",
    # 三値結果
    "Equality",
    "Tristate",
    # 例外
    "CollectionConstructionError",
    "InvalidElementError",
    "InvalidArrangementError",
    "IndeterminateComparisonError",
    "EngineError",
    "HandleReleasedError",
    "OwnershipError",
    # ロギング
    "setup_default_logging",
]

# バージョン情報
__version__ = "2026.10"
