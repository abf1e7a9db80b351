"""
どこで: `features.factory`
何を: エンジンコンテキストと構築フラグ（Z/M 次元・MultiPolygon 検証の省略）を保持し、
      Point/LineString/Polygon と各種コレクションを生成する `Factory`。
なぜ: 生成されるオブジェクトが同じコンテキスト・同じ比較条件（check_z）を共有するようにするため。

既定値は `common.settings`（`PXG_DEFAULT_HAS_Z` / `PXG_DEFAULT_HAS_M` /
`PXG_LENIENT_MULTI_POLYGON`）から読む。引数で明示した値が優先される。

使用例:
    f = Factory()
    a = f.polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    b = f.polygon([(1, 0), (2, 0), (2, 1), (1, 1)])
    mp = f.multi_polygon([a, b])        # 辺を共有 → InvalidArrangementError
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Sequence

import shapely
from shapely.errors import GEOSException

from common import settings as _settings
from common.types import CoordLike
from engine.core.context import EngineContext
from engine.core.handle import GeometryHandle

from .base import Feature, Line, LinearRing, LineString, Point, Polygon
from .collection import GeometryCollection, MultiLineString, MultiPoint, MultiPolygon
from .wrap import wrap


class Factory:
    """ジオメトリの生成窓口。"""

    __slots__ = ("_context", "_has_z", "_has_m", "_lenient")

    def __init__(
        self,
        *,
        has_z: bool | None = None,
        has_m: bool | None = None,
        lenient_multi_polygon_assertions: bool | None = None,
        context: EngineContext | None = None,
    ) -> None:
        s = _settings.get()
        self._has_z = s.DEFAULT_HAS_Z if has_z is None else bool(has_z)
        self._has_m = s.DEFAULT_HAS_M if has_m is None else bool(has_m)
        self._lenient = (
            s.LENIENT_MULTI_POLYGON
            if lenient_multi_polygon_assertions is None
            else bool(lenient_multi_polygon_assertions)
        )
        self._context = context if context is not None else EngineContext()

    # ── 属性 ─────────────────────
    @property
    def context(self) -> EngineContext:
        return self._context

    @property
    def has_z(self) -> bool:
        return self._has_z

    @property
    def has_m(self) -> bool:
        return self._has_m

    @property
    def lenient_multi_polygon_assertions(self) -> bool:
        """True なら MultiPolygon 構築時の位相検証を省略する。"""
        return self._lenient

    @property
    def check_z(self) -> bool:
        """構造比較で第 3 座標も比べるか。"""
        return self._has_z or self._has_m

    def _key(self) -> tuple[bool, bool, bool]:
        return (self._has_z, self._has_m, self._lenient)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Factory):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(("Factory",) + self._key())

    def __repr__(self) -> str:
        return (
            f"Factory(has_z={self._has_z}, has_m={self._has_m}, "
            f"lenient_multi_polygon_assertions={self._lenient})"
        )

    # ── 内部 ─────────────────────
    def _coord(self, p: "CoordLike | Point") -> tuple[float, ...]:
        if isinstance(p, Point):
            z = p.z
            xyz: tuple[float, ...] = (p.x, p.y, 0.0 if z is None else z)
        else:
            vals = tuple(float(v) for v in p)
            if len(vals) not in (2, 3):
                raise ValueError(f"座標は 2 次元または 3 次元である必要があります: {p!r}")
            # 欠けた Z（2 次元入力・NaN）は 0 で補う
            xyz = vals if len(vals) == 3 and not math.isnan(vals[2]) else vals[:2] + (0.0,)
        return xyz if self.check_z else xyz[:2]

    def _coords(self, points: Iterable[Any]) -> list[tuple[float, ...]]:
        return [self._coord(p) for p in points]

    def _ring_coords(self, ring: Any) -> list[tuple[float, ...]]:
        if isinstance(ring, LineString):
            return self._coords(shapely.get_coordinates(ring.to_shapely(), include_z=True))
        return self._coords(ring)

    def _make(self, cls: type[Feature], geom: Any) -> Any:
        return wrap(self, self._context.adopt(geom), cls)

    # ── 単体ジオメトリ ────────────
    def point(self, x: float, y: float, z: float | None = None) -> Point:
        if self.check_z:
            geom = shapely.Point(float(x), float(y), float(z or 0.0))
        else:
            geom = shapely.Point(float(x), float(y))
        return self._make(Point, geom)

    def line_string(self, points: Iterable[Any]) -> LineString:
        coords = self._coords(points)
        try:
            geom = shapely.LineString(coords)
        except (GEOSException, ValueError) as exc:
            raise ValueError(f"LineString を生成できません: {exc}") from exc
        return self._make(LineString, geom)

    def line(self, start: "CoordLike | Point", end: "CoordLike | Point") -> Line:
        geom = shapely.LineString(self._coords([start, end]))
        return self._make(Line, geom)

    def linear_ring(self, points: Iterable[Any]) -> LinearRing:
        coords = self._coords(points)
        try:
            geom = shapely.LinearRing(coords)
        except (GEOSException, ValueError) as exc:
            raise ValueError(f"LinearRing を生成できません: {exc}") from exc
        return self._make(LinearRing, geom)

    def polygon(self, outer_ring: Any, inner_rings: Sequence[Any] = ()) -> Polygon:
        shell = self._ring_coords(outer_ring)
        holes = [self._ring_coords(r) for r in inner_rings]
        try:
            geom = shapely.Polygon(shell, holes or None)
        except (GEOSException, ValueError) as exc:
            raise ValueError(f"Polygon を生成できません: {exc}") from exc
        return self._make(Polygon, geom)

    # ── コレクション ──────────────
    def collection(self, elements: Iterable[Any]) -> GeometryCollection:
        return GeometryCollection.create(self, elements)

    def multi_point(self, elements: Iterable[Any]) -> MultiPoint:
        return MultiPoint.create(self, elements)

    def multi_line_string(self, elements: Iterable[Any]) -> MultiLineString:
        return MultiLineString.create(self, elements)

    def multi_polygon(self, elements: Iterable[Any]) -> MultiPolygon:
        return MultiPolygon.create(self, elements)

    # ── ハンドル ─────────────────
    def adopt(self, geom: Any) -> GeometryHandle:
        """Shapely ジオメトリをこの Factory のコンテキストの detached ハンドルで包む。"""
        return self._context.adopt(geom)

    def wrap(self, handle: GeometryHandle, class_hint: type[Feature] | None = None) -> Feature:
        return wrap(self, handle, class_hint)


__all__ = ["Factory"]
