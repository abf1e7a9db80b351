"""
どこで: `features.base`
何を: 呼び出し側に渡すジオメトリオブジェクトの基底 `Feature` と、単体の Point/LineString/Line/
      LinearRing/Polygon。種別 → 標準クラスの対応表（`standard_class`）もここで管理する。
なぜ: エンジンのハンドルを 1 個ずつ所有する薄いラッパとして、寿命・等価比較・種別問い合わせを
      すべての型で同じ規約にそろえるため。

規約:
- `Feature` は自分のハンドルを 1 個所有する。`release()` で明示的に破棄できる。
- 外へ渡すジオメトリは常に複製（`to_shapely()` も複製を返す）。
- `rep_equals` は三値（`Equality`）。`==` は UNKNOWN のとき `IndeterminateComparisonError`。
  ただし解放済みのオブジェクトを含む `==` は同一性で判定する（`rep_equals` は UNKNOWN のまま）。
- 包んだハンドルは Feature が保持する（claimed）。コレクションの要素として再利用できない。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, ClassVar, TypeVar

import shapely

from engine.core.compare import geometries_equal
from engine.core.handle import GeometryHandle
from engine.core.kinds import GeometryKind
from engine.core.tristate import Equality

from .errors import IndeterminateComparisonError

if TYPE_CHECKING:  # pragma: no cover
    from engine.core.context import EngineContext

    from .factory import Factory

F = TypeVar("F", bound="Feature")

_STANDARD_CLASSES: dict[GeometryKind, type["Feature"]] = {}


def standard(kind: GeometryKind) -> Callable[[type[F]], type[F]]:
    """種別の標準クラスとして登録するデコレータ（KIND も設定する）。"""

    def decorator(cls: type[F]) -> type[F]:
        if kind in _STANDARD_CLASSES and _STANDARD_CLASSES[kind] is not cls:
            raise ValueError(f"{kind.name} の標準クラスは既に登録されています")
        cls.KIND = kind
        _STANDARD_CLASSES[kind] = cls
        return cls

    return decorator


def standard_class(kind: GeometryKind | None) -> type["Feature"] | None:
    if kind is None:
        return None
    return _STANDARD_CLASSES.get(kind)


class Feature:
    """エンジンハンドルを 1 個所有するジオメトリオブジェクトの基底。"""

    KIND: ClassVar[GeometryKind]

    __slots__ = ("_factory", "_handle")

    def __init__(self, factory: "Factory", handle: GeometryHandle) -> None:
        if handle.context is not factory.context:
            raise ValueError("ハンドルと Factory のエンジンコンテキストが一致しません")
        handle.claim()
        self._factory = factory
        self._handle = handle

    # ── 表現の補正（サブタイプ復元用） ──
    @classmethod
    def _coerce_geometry(cls, geom: Any) -> Any:
        """エンジンのジオメトリをこのクラスの表現に合わせる（既定は無変換）。"""
        return geom

    # ── 基本 ─────────────────────
    @property
    def factory(self) -> "Factory":
        return self._factory

    @property
    def _context(self) -> "EngineContext":
        return self._handle.context

    @property
    def _geom(self) -> Any:
        return self._handle.geom

    def geometry_type(self) -> GeometryKind:
        return type(self).KIND

    @property
    def is_empty(self) -> bool:
        return bool(shapely.is_empty(self._geom))

    @property
    def is_released(self) -> bool:
        return self._handle.is_released

    def release(self) -> None:
        """所有するハンドルを破棄する（以後のアクセスは HandleReleasedError）。"""
        self._handle.release_claimed()

    def to_shapely(self) -> Any:
        """Shapely ジオメトリの複製を返す。"""
        return self._context.copy_geometry(self._geom)

    # ── 等価 ─────────────────────
    def rep_equals(self, other: object) -> Equality:
        """表現としての等価（クラス・Factory・構造が一致するか）を三値で返す。"""
        if not isinstance(other, Feature):
            return Equality.NOT_EQUAL
        if type(self) is not type(other) or self._factory != other._factory:
            return Equality.NOT_EQUAL
        if self.is_released or other.is_released:
            return Equality.UNKNOWN
        return geometries_equal(self._context, self._geom, other._geom, self._factory.check_z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        # 解放済みは同一性で比較（dict/set の探索で例外にしない）
        if self.is_released or other.is_released:
            return self is other
        res = self.rep_equals(other)
        if res is Equality.UNKNOWN:
            raise IndeterminateComparisonError(
                f"{type(self).__name__} の等価性を判定できません"
            )
        return res is Equality.EQUAL

    def __ne__(self, other: object) -> bool:
        res = self.__eq__(other)
        if res is NotImplemented:
            return res
        return not res

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._factory))

    def __repr__(self) -> str:
        if self.is_released:
            return f"{type(self).__name__}(<released>)"
        return f"{type(self).__name__}({self._geom!r})"


@standard(GeometryKind.POINT)
class Point(Feature):
    __slots__ = ()

    def _coords(self) -> Any:
        return shapely.get_coordinates(self._geom, include_z=True)

    @property
    def x(self) -> float:
        return float(self._coords()[0][0])

    @property
    def y(self) -> float:
        return float(self._coords()[0][1])

    @property
    def z(self) -> float | None:
        if not self._context.has_z(self._geom):
            return None
        return float(self._coords()[0][2])


@standard(GeometryKind.LINE_STRING)
class LineString(Feature):
    __slots__ = ()

    @property
    def num_points(self) -> int:
        return int(shapely.get_num_coordinates(self._geom))

    def point_n(self, index: int) -> Point | None:
        """i 番目の頂点（範囲外は None）。"""
        if not 0 <= index < self.num_points:
            return None
        handle = self._context.adopt(shapely.get_point(self._geom, index))
        return Point(self._factory, handle)

    def is_closed(self) -> bool | None:
        """始点と終点が一致するか（判定不能は None）。"""
        return self._context.is_closed(self._geom).to_optional()

    def length(self) -> float | None:
        return self._context.length(self._geom)


class Line(LineString):
    """2 点だけからなる LineString（サブタイプ）。"""

    __slots__ = ()


@standard(GeometryKind.LINEAR_RING)
class LinearRing(LineString):
    """閉じた LineString（サブタイプ）。LineString 表現のエンジン値はリングへ戻す。"""

    __slots__ = ()

    @classmethod
    def _coerce_geometry(cls, geom: Any) -> Any:
        if shapely.get_type_id(geom) == GeometryKind.LINE_STRING:
            return shapely.LinearRing(shapely.get_coordinates(geom, include_z=bool(shapely.has_z(geom))))
        return geom


@standard(GeometryKind.POLYGON)
class Polygon(Feature):
    __slots__ = ()

    def exterior_ring(self) -> LinearRing | None:
        ring = self._context.exterior_ring(self._geom)
        if ring is None:
            return None
        return LinearRing(self._factory, self._context.clone(ring))

    @property
    def num_interior_rings(self) -> int:
        return self._context.interior_ring_count(self._geom)

    def interior_ring_n(self, index: int) -> LinearRing | None:
        ring = self._context.interior_ring_at(self._geom, index)
        if ring is None:
            return None
        return LinearRing(self._factory, self._context.clone(ring))

    def area(self) -> float | None:
        return self._context.area(self._geom)


__all__ = [
    "Feature",
    "Point",
    "LineString",
    "Line",
    "LinearRing",
    "Polygon",
    "standard",
    "standard_class",
]
