"""
どこで: `features.collection`
何を: GeometryCollection / MultiPoint / MultiLineString / MultiPolygon の構築・要素アクセス・派生演算。
なぜ: 緩く型付けされた要素列から、全か無かの構築（途中失敗で資源を残さない）と
      MultiPolygon の位相検証を経て、不変のコレクションを作るため。

構築の流れ（`create`）:
1) 各要素を順に detached ハンドルへ変換し `HandleBuffer` に積む（サブタイプタグも記録）。
   失敗した時点で `InvalidElementError(index=i)`。それまでのハンドルはバッファが解放する。
2) エンジンでコレクションを組み立てる（成功で要素ハンドルの所有権が移る）。
   失敗は `InvalidArrangementError`。
3) MultiPolygon かつ Factory の検証が有効なら、組立後の子要素で位相検証。
   違反時は組み立てたコレクションごと解放して `InvalidArrangementError(pair=(i, j))`。
4) タグは 1 個でも非 None があればタプル、全て None なら None（疎な表現）。

要素アクセス:
- `geometry_n(i)`: 非負の添字のみ（負は None）。
- `element_at(i)` / `obj[i]`: 負の添字は末尾から数える。範囲外は None（例外にしない）。
- `each(visitor)` / `iter(obj)`: 子の複製を添字順に 1 つずつ生成する。
いずれも親の格納領域を外へ渡さず、常に複製を返す。
"""

from __future__ import annotations

import logging
import operator
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, TypeVar

from engine.core.errors import AssemblyError, OwnershipError
from engine.core.handle import GeometryHandle, HandleBuffer
from engine.core.kinds import GeometryKind, element_kind_for
from engine.core.tristate import Tristate
from engine.core.validate import find_multi_polygon_violation

from .base import Feature, Point, standard
from .convert import to_detached_handle
from .errors import InvalidArrangementError, InvalidElementError
from .wrap import wrap, wrap_clone

if TYPE_CHECKING:  # pragma: no cover
    from .factory import Factory

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="GeometryCollection")


def _build(cls: type[C], factory: "Factory", elements: Iterable[Any]) -> C:
    kind = cls.KIND
    expected = element_kind_for(kind)
    ctx = factory.context
    tags: list[type[Feature] | None] = []

    with HandleBuffer(ctx) as buf:
        for i, element in enumerate(elements):
            try:
                handle, tag = to_detached_handle(element, factory, expected)
            except InvalidElementError as exc:
                logger.debug("%s: element %d rejected: %s", kind.name, i, exc)
                raise InvalidElementError(f"要素 {i}: {exc}", index=i) from exc
            try:
                buf.append(handle)
            except OwnershipError as exc:
                raise InvalidElementError(f"要素 {i}: {exc}", index=i) from exc
            tags.append(tag)

        try:
            parent = ctx.create_collection(kind, buf.handles)
        except AssemblyError as exc:
            raise InvalidArrangementError(str(exc)) from exc

        if kind is GeometryKind.MULTI_POLYGON and not factory.lenient_multi_polygon_assertions:
            geom = parent.geom
            polygons = [ctx.child_at(geom, i) for i in range(ctx.child_count(geom))]
            pair = find_multi_polygon_violation(ctx, polygons)
            if pair is not None:
                parent.release()
                raise InvalidArrangementError(
                    f"MultiPolygon の要素 {pair[0]} と {pair[1]} が面または辺で重なっています",
                    pair=pair,
                )

    subtype_tags = tuple(tags) if any(t is not None for t in tags) else None
    return cls(factory, parent, subtype_tags)


@standard(GeometryKind.GEOMETRY_COLLECTION)
class GeometryCollection(Feature):
    __slots__ = ("_subtype_tags",)

    def __init__(
        self,
        factory: "Factory",
        handle: GeometryHandle,
        subtype_tags: tuple[type[Feature] | None, ...] | None = None,
    ) -> None:
        super().__init__(factory, handle)
        self._subtype_tags = subtype_tags

    @classmethod
    def create(cls: type[C], factory: "Factory", elements: Iterable[Any]) -> C:
        """要素列からコレクションを構築する（全か無か）。

        Raises
        ------
        InvalidElementError
            要素の変換に失敗（`index` は最初に失敗した位置）。
        InvalidArrangementError
            組立失敗、または MultiPolygon の位相条件違反（`pair` は違反した組）。
        """
        return _build(cls, factory, elements)

    @property
    def subtype_tags(self) -> tuple[type[Feature] | None, ...] | None:
        return self._subtype_tags

    def _tag_at(self, index: int) -> type[Feature] | None:
        if self._subtype_tags is None:
            return None
        return self._subtype_tags[index]

    # ── サイズ ───────────────────
    def num_geometries(self) -> int:
        return self._context.child_count(self._geom)

    def size(self) -> int:
        return self.num_geometries()

    def __len__(self) -> int:
        return max(self.num_geometries(), 0)

    # ── 要素アクセス ─────────────
    def _element(self, index: int, *, allow_negative: bool) -> Feature | None:
        index = operator.index(index)
        if index < 0 and not allow_negative:
            return None
        geom = self._geom
        count = self._context.child_count(geom)
        if index < 0:
            index += count
        if not 0 <= index < count:
            return None
        child = self._context.child_at(geom, index)
        if child is None:
            return None
        return wrap_clone(self._factory, child, self._tag_at(index))

    def geometry_n(self, index: int) -> Feature | None:
        """i 番目の要素の複製（負の添字・範囲外は None）。"""
        return self._element(index, allow_negative=False)

    def element_at(self, index: int) -> Feature | None:
        """i 番目の要素の複製（負の添字は末尾から。範囲外は None）。"""
        return self._element(index, allow_negative=True)

    def __getitem__(self, index: int) -> Feature | None:
        return self._element(index, allow_negative=True)

    def __iter__(self) -> Iterator[Feature]:
        ctx = self._context
        geom = self._geom
        for i in range(ctx.child_count(geom)):
            child = ctx.child_at(geom, i)
            if child is None:
                continue
            yield wrap_clone(self._factory, child, self._tag_at(i))

    def each(self: C, visitor: Callable[[Feature], Any]) -> C:
        for element in self:
            visitor(element)
        return self


@standard(GeometryKind.MULTI_POINT)
class MultiPoint(GeometryCollection):
    __slots__ = ()


@standard(GeometryKind.MULTI_LINE_STRING)
class MultiLineString(GeometryCollection):
    __slots__ = ()

    def length(self) -> float | None:
        """全要素の長さの合計（エンジンへの 1 回の呼び出し）。"""
        return self._context.length(self._geom)

    def is_closed(self) -> bool | None:
        """全要素が閉じているか（要素 0 個は True、判定不能は None）。"""
        ctx = self._context
        geom = self._geom
        for i in range(ctx.child_count(geom)):
            res = ctx.is_closed(ctx.child_at(geom, i))
            if res is Tristate.FALSE:
                return False
            if res is Tristate.UNKNOWN:
                return None
        return True


@standard(GeometryKind.MULTI_POLYGON)
class MultiPolygon(GeometryCollection):
    __slots__ = ()

    def area(self) -> float | None:
        return self._context.area(self._geom)

    def centroid(self) -> Point | None:
        handle = self._context.centroid(self._geom)
        if handle is None:
            return None
        return wrap(self._factory, handle)

    def point_on_surface(self) -> Point | None:
        handle = self._context.point_on_surface(self._geom)
        if handle is None:
            return None
        return wrap(self._factory, handle)


__all__ = ["GeometryCollection", "MultiPoint", "MultiLineString", "MultiPolygon"]
