"""
どこで: `engine.core.compare`
何を: ジオメトリ木の構造的な等価判定（三値 `Equality`）。
なぜ: 入れ子のコレクションを種別ごとに正しい比較関数へ振り分け、判定不能（UNKNOWN）を
      False に丸めずに上位へ伝播させるため。

比較は位相的ではなく構造的:
- 子の順序・子ごとの表現（座標列）が完全に一致する場合のみ EQUAL。
- 子の並べ替えや始点の異なる同一リングは NOT_EQUAL。

種別ディスパッチ:
- POINT / LINE_STRING / LINEAR_RING → `coord_seqs_equal`
- POLYGON → `polygons_equal`
- GEOMETRY_COLLECTION / MULTI_* → `collections_equal`（再帰）
- 未登録の種別（将来のエンジンが返す未知 id など）→ UNKNOWN
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from common.base_registry import BaseRegistry

from .kinds import GeometryKind
from .tristate import Equality

if TYPE_CHECKING:  # pragma: no cover
    from .context import EngineContext

Comparator = Callable[["EngineContext", Any, Any, bool], Equality]

_comparators = BaseRegistry()


def comparator_for(kind: GeometryKind | None) -> Comparator | None:
    """種別に対応する比較関数（未登録は None）。"""
    if kind is None:
        return None
    return _comparators.lookup(kind.name)


def registered_kinds() -> list[str]:
    return _comparators.list_all()


@_comparators.register("Point", "LineString", "LinearRing")
def coord_seqs_equal(ctx: "EngineContext", a: Any, b: Any, check_z: bool) -> Equality:
    """座標列の完全一致。`check_z` が真なら Z も比較する（欠けた次元は NaN 同士で一致）。"""
    ca = ctx.coordinates(a, include_z=check_z)
    cb = ctx.coordinates(b, include_z=check_z)
    if ca is None or cb is None:
        return Equality.UNKNOWN
    if ca.shape != cb.shape:
        return Equality.NOT_EQUAL
    return Equality.from_bool(bool(np.array_equal(ca, cb, equal_nan=True)))


@_comparators.register("Polygon")
def polygons_equal(ctx: "EngineContext", a: Any, b: Any, check_z: bool) -> Equality:
    """外環 → 内環数 → 各内環（順序どおり）を座標列で比較。"""
    if a is None or b is None:
        return Equality.UNKNOWN
    ext_a = ctx.exterior_ring(a)
    ext_b = ctx.exterior_ring(b)
    if ext_a is None or ext_b is None:
        return Equality.UNKNOWN
    result = coord_seqs_equal(ctx, ext_a, ext_b, check_z)
    if result is not Equality.EQUAL:
        return result
    n_a = ctx.interior_ring_count(a)
    n_b = ctx.interior_ring_count(b)
    if n_a < 0 or n_b < 0:
        return Equality.UNKNOWN
    if n_a != n_b:
        return Equality.NOT_EQUAL
    for i in range(n_a):
        result = coord_seqs_equal(
            ctx, ctx.interior_ring_at(a, i), ctx.interior_ring_at(b, i), check_z
        )
        if result is not Equality.EQUAL:
            return result
    return Equality.EQUAL


@_comparators.register("GeometryCollection", "MultiPoint", "MultiLineString", "MultiPolygon")
def collections_equal(ctx: "EngineContext", a: Any, b: Any, check_z: bool) -> Equality:
    """コレクションの構造比較。

    - どちらかが欠けている → UNKNOWN
    - 子の数が取れない → UNKNOWN、数が違う → NOT_EQUAL（確定）
    - 子を順に取り出し、種別が取れない → UNKNOWN、種別が違う → NOT_EQUAL
    - 種別ごとの比較で最初に EQUAL 以外が出たらその値を返す
    """
    if a is None or b is None:
        return Equality.UNKNOWN
    len_a = ctx.child_count(a)
    len_b = ctx.child_count(b)
    if len_a < 0 or len_b < 0:
        return Equality.UNKNOWN
    if len_a != len_b:
        return Equality.NOT_EQUAL
    for i in range(len_a):
        sub_a = ctx.child_at(a, i)
        sub_b = ctx.child_at(b, i)
        if sub_a is None or sub_b is None:
            return Equality.UNKNOWN
        type_a = ctx.kind_id(sub_a)
        type_b = ctx.kind_id(sub_b)
        if type_a < 0 or type_b < 0:
            return Equality.UNKNOWN
        if type_a != type_b:
            return Equality.NOT_EQUAL
        compare = comparator_for(GeometryKind.from_id(type_a))
        if compare is None:
            return Equality.UNKNOWN
        result = compare(ctx, sub_a, sub_b, check_z)
        if result is not Equality.EQUAL:
            return result
    return Equality.EQUAL


def geometries_equal(ctx: "EngineContext", a: Any, b: Any, check_z: bool) -> Equality:
    """任意種別の 2 ジオメトリを比較する入口（種別が違えば NOT_EQUAL）。"""
    if a is None or b is None:
        return Equality.UNKNOWN
    type_a = ctx.kind_id(a)
    type_b = ctx.kind_id(b)
    if type_a < 0 or type_b < 0:
        return Equality.UNKNOWN
    if type_a != type_b:
        return Equality.NOT_EQUAL
    compare = comparator_for(GeometryKind.from_id(type_a))
    if compare is None:
        return Equality.UNKNOWN
    return compare(ctx, a, b, check_z)


__all__ = [
    "coord_seqs_equal",
    "polygons_equal",
    "collections_equal",
    "geometries_equal",
    "comparator_for",
    "registered_kinds",
]
