"""
どこで: `engine.core.kinds`
何を: ジオメトリ種別（kind）の列挙と、コレクション種別ごとの要素種別の対応表。
なぜ: 数値 type id での分岐を列挙型へ集約し、比較・変換・検証が同じ対応表を参照するため。

値は GEOS の type id（`shapely.get_type_id` の戻り値）と一致させている。
将来のエンジンが未知の id を返した場合、`GeometryKind.from_id` は `None` を返す。
"""

from __future__ import annotations

from enum import IntEnum


class GeometryKind(IntEnum):
    POINT = 0
    LINE_STRING = 1
    LINEAR_RING = 2
    POLYGON = 3
    MULTI_POINT = 4
    MULTI_LINE_STRING = 5
    MULTI_POLYGON = 6
    GEOMETRY_COLLECTION = 7

    @classmethod
    def from_id(cls, type_id: int) -> "GeometryKind | None":
        """エンジンの type id から種別を得る（未知/失敗値は None）。"""
        try:
            return cls(int(type_id))
        except (TypeError, ValueError):
            return None

    @property
    def is_collection(self) -> bool:
        return self in COLLECTION_KINDS

    @property
    def is_linear(self) -> bool:
        return self in (GeometryKind.LINE_STRING, GeometryKind.LINEAR_RING)


COLLECTION_KINDS = frozenset(
    {
        GeometryKind.GEOMETRY_COLLECTION,
        GeometryKind.MULTI_POINT,
        GeometryKind.MULTI_LINE_STRING,
        GeometryKind.MULTI_POLYGON,
    }
)

# コレクション種別 → 直下要素に要求する種別（None は制約なし）
_ELEMENT_KINDS: dict[GeometryKind, GeometryKind | None] = {
    GeometryKind.GEOMETRY_COLLECTION: None,
    GeometryKind.MULTI_POINT: GeometryKind.POINT,
    GeometryKind.MULTI_LINE_STRING: GeometryKind.LINE_STRING,
    GeometryKind.MULTI_POLYGON: GeometryKind.POLYGON,
}


def element_kind_for(kind: GeometryKind) -> GeometryKind | None:
    """コレクション種別の要素種別を返す。

    Raises
    ------
    ValueError
        `kind` がコレクション種別でない場合。
    """
    if kind not in _ELEMENT_KINDS:
        raise ValueError(f"コレクション種別ではありません: {kind!r}")
    return _ELEMENT_KINDS[kind]


__all__ = ["GeometryKind", "COLLECTION_KINDS", "element_kind_for"]
