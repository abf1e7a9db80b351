"""
どこで: `features` パッケージ。
何を: 呼び出し側に渡すジオメトリオブジェクト（単体・コレクション）と Factory・変換/包み込み。
なぜ: エンジンハンドルの寿命管理を隠し、不変のジオメトリオブジェクトとして扱えるようにするため。
"""

from .base import Feature, Line, LinearRing, LineString, Point, Polygon
from .collection import GeometryCollection, MultiLineString, MultiPoint, MultiPolygon
from .errors import (
    CollectionConstructionError,
    IndeterminateComparisonError,
    InvalidArrangementError,
    InvalidElementError,
)
from .factory import Factory

__all__ = [
    "Factory",
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
    "CollectionConstructionError",
    "InvalidElementError",
    "InvalidArrangementError",
    "IndeterminateComparisonError",
]
