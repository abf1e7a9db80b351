"""
どこで: `engine.core.context`
何を: Shapely（GEOS）への唯一の窓口 `EngineContext`。ハンドルの生成/組立/破棄と、
      種別・子要素・relate・長さ/面積/重心などの問い合わせプリミティブを提供する。
なぜ: エンジン呼び出しと失敗値への写像（-1/None/UNKNOWN）を 1 か所に閉じ込め、
      上位層（比較・検証・features）がエンジン例外を意識せずに済むようにするため。

方針:
- 問い合わせ系は例外を投げない。エンジン例外は DEBUG ログに残し、失敗値を返す。
  - `child_count` / `kind_id` → -1、`child_at` / `length` / `area` → None、
    `relate_pattern` / `is_closed` → `Tristate.UNKNOWN`
- 寿命系（`create_collection` / `release`）は誤用を例外で知らせる。
- 生存ハンドル数 `live_handles` を数え、構築失敗時に資源が残らないことを観測可能にする。
- スレッド安全ではない（1 コンテキストは 1 スレッドから使う前提。ロックは持たない）。
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

import numpy as np
import shapely
from shapely.errors import GEOSException

from .errors import AssemblyError, OwnershipError
from .handle import GeometryHandle
from .kinds import GeometryKind
from .tristate import Tristate

logger = logging.getLogger(__name__)

_ENGINE_ERRORS = (GEOSException, TypeError, ValueError)

# 種別ごとのコレクション組立関数（要素あり / 空）
_COLLECTION_BUILDERS: dict[GeometryKind, tuple[Callable[..., Any], Callable[[], Any]]] = {
    GeometryKind.GEOMETRY_COLLECTION: (shapely.geometrycollections, shapely.GeometryCollection),
    GeometryKind.MULTI_POINT: (shapely.multipoints, shapely.MultiPoint),
    GeometryKind.MULTI_LINE_STRING: (shapely.multilinestrings, shapely.MultiLineString),
    GeometryKind.MULTI_POLYGON: (shapely.multipolygons, shapely.MultiPolygon),
}


def _identity(coords: np.ndarray) -> np.ndarray:
    return coords


def _object_array(geoms: Sequence[Any]) -> np.ndarray:
    # np.asarray はジオメトリ列を数値配列と誤解釈し得るため 1 要素ずつ詰める
    arr = np.empty(len(geoms), dtype=object)
    for i, g in enumerate(geoms):
        arr[i] = g
    return arr


class EngineContext:
    """エンジン実行コンテキスト。"""

    def __init__(self, name: str | None = None) -> None:
        self.name = name or "default"
        self._live = 0

    def __repr__(self) -> str:
        return f"EngineContext(name={self.name!r}, live_handles={self._live})"

    # ── ハンドル台帳 ─────────────
    @property
    def live_handles(self) -> int:
        """生成済みで未解放のハンドル数（所有されている要素ハンドルを含む）。"""
        return self._live

    def _track(self, handle: GeometryHandle) -> None:
        self._live += 1

    def _untrack(self, handle: GeometryHandle) -> None:
        self._live -= 1

    # ── 生成/破棄 ────────────────
    def adopt(self, geom: Any) -> GeometryHandle:
        """エンジンのジオメトリを新しい detached ハンドルで包む。"""
        if not isinstance(geom, shapely.Geometry):
            raise TypeError(f"Shapely ジオメトリではありません: {type(geom).__name__}")
        return GeometryHandle(self, geom)

    def clone(self, geom: Any) -> GeometryHandle:
        """ジオメトリを複製し、新しい detached ハンドルとして返す。"""
        return GeometryHandle(self, self.copy_geometry(geom))

    def copy_geometry(self, geom: Any) -> Any:
        """ジオメトリの複製（ハンドル台帳には載せない）。

        `shapely.transform` は GEOS 上で新しいジオメトリを確保する（LinearRing 等の型も保持）。
        """
        if not isinstance(geom, shapely.Geometry):
            raise TypeError(f"Shapely ジオメトリではありません: {type(geom).__name__}")
        try:
            include_z = bool(shapely.has_z(geom))
            return shapely.transform(geom, _identity, include_z=include_z)
        except _ENGINE_ERRORS as exc:
            raise AssemblyError(f"ジオメトリを複製できません: {exc}") from exc

    def create_collection(
        self, kind: GeometryKind, handles: Sequence[GeometryHandle]
    ) -> GeometryHandle:
        """要素ハンドル列からコレクションを組み立てる。

        成功時、各要素ハンドルの所有権は返り値のハンドルへ移る。
        失敗時は要素ハンドルに手を付けない（呼び出し側のバッファが解放する）。

        Raises
        ------
        OwnershipError
            要素に所有済み/解放済み/別コンテキストのハンドルが含まれる場合。
        AssemblyError
            エンジンが組立に失敗した場合。
        """
        if kind not in _COLLECTION_BUILDERS:
            raise ValueError(f"コレクション種別ではありません: {kind!r}")
        for h in handles:
            if not h.is_detached:
                raise OwnershipError("既に所有されている（または解放済みの）ハンドルは組み立てに使えません")
            if h.context is not self:
                raise OwnershipError("異なるエンジンコンテキストのハンドルは組み立てに使えません")
        if len({id(h) for h in handles}) != len(handles):
            raise OwnershipError("同じハンドルを複数の要素として組み立てることはできません")

        build_many, build_empty = _COLLECTION_BUILDERS[kind]
        try:
            if handles:
                geom = build_many(_object_array([h.geom for h in handles]))
            else:
                geom = build_empty()
        except _ENGINE_ERRORS as exc:
            logger.debug("collection assembly failed (kind=%s, n=%d): %s", kind.name, len(handles), exc)
            raise AssemblyError(f"{kind.name} を組み立てられません: {exc}") from exc

        parent = GeometryHandle(self, geom)
        parent._adopt_parts(handles)
        return parent

    def release(self, handle: GeometryHandle) -> None:
        handle.release()

    # ── 問い合わせ ───────────────
    def kind_id(self, geom: Any) -> int:
        """GEOS の type id（失敗時 -1）。"""
        if geom is None:
            return -1
        try:
            return int(shapely.get_type_id(geom))
        except _ENGINE_ERRORS as exc:
            logger.debug("kind_id failed: %s", exc)
            return -1

    def kind(self, geom: Any) -> GeometryKind | None:
        return GeometryKind.from_id(self.kind_id(geom))

    def child_count(self, geom: Any) -> int:
        """直下の子要素数（失敗時 -1）。非コレクションは 1（GEOS 準拠）。"""
        if geom is None:
            return -1
        try:
            return int(shapely.get_num_geometries(geom))
        except _ENGINE_ERRORS as exc:
            logger.debug("child_count failed: %s", exc)
            return -1

    def child_at(self, geom: Any, index: int) -> Any | None:
        """i 番目の子要素（借用。範囲外/失敗時 None）。"""
        count = self.child_count(geom)
        if not 0 <= index < count:
            return None
        try:
            return shapely.get_geometry(geom, index)
        except _ENGINE_ERRORS as exc:
            logger.debug("child_at(%d) failed: %s", index, exc)
            return None

    def has_z(self, geom: Any) -> bool:
        try:
            return bool(shapely.has_z(geom))
        except _ENGINE_ERRORS:
            return False

    def relate_pattern(self, a: Any, b: Any, pattern: str) -> Tristate:
        """DE-9IM パターンとの一致判定。"""
        if a is None or b is None:
            return Tristate.UNKNOWN
        try:
            return Tristate.from_bool(bool(shapely.relate_pattern(a, b, pattern)))
        except _ENGINE_ERRORS as exc:
            logger.debug("relate_pattern(%s) failed: %s", pattern, exc)
            return Tristate.UNKNOWN

    def is_closed(self, geom: Any) -> Tristate:
        if geom is None:
            return Tristate.UNKNOWN
        try:
            return Tristate.from_bool(bool(shapely.is_closed(geom)))
        except _ENGINE_ERRORS as exc:
            logger.debug("is_closed failed: %s", exc)
            return Tristate.UNKNOWN

    def length(self, geom: Any) -> float | None:
        return self._measure(shapely.length, geom)

    def area(self, geom: Any) -> float | None:
        return self._measure(shapely.area, geom)

    def centroid(self, geom: Any) -> GeometryHandle | None:
        return self._derive(shapely.centroid, geom)

    def point_on_surface(self, geom: Any) -> GeometryHandle | None:
        return self._derive(shapely.point_on_surface, geom)

    def coordinates(self, geom: Any, *, include_z: bool) -> np.ndarray | None:
        """座標配列 (N, 2|3)（失敗時 None）。"""
        if geom is None:
            return None
        try:
            return shapely.get_coordinates(geom, include_z=include_z)
        except _ENGINE_ERRORS as exc:
            logger.debug("coordinates failed: %s", exc)
            return None

    def exterior_ring(self, polygon: Any) -> Any | None:
        try:
            return shapely.get_exterior_ring(polygon)
        except _ENGINE_ERRORS as exc:
            logger.debug("exterior_ring failed: %s", exc)
            return None

    def interior_ring_count(self, polygon: Any) -> int:
        try:
            return int(shapely.get_num_interior_rings(polygon))
        except _ENGINE_ERRORS as exc:
            logger.debug("interior_ring_count failed: %s", exc)
            return -1

    def interior_ring_at(self, polygon: Any, index: int) -> Any | None:
        count = self.interior_ring_count(polygon)
        if not 0 <= index < count:
            return None
        try:
            return shapely.get_interior_ring(polygon, index)
        except _ENGINE_ERRORS as exc:
            logger.debug("interior_ring_at(%d) failed: %s", index, exc)
            return None

    # ── 内部 ─────────────────────
    def _measure(self, fn: Callable[[Any], Any], geom: Any) -> float | None:
        if geom is None:
            return None
        try:
            value = float(fn(geom))
        except _ENGINE_ERRORS as exc:
            logger.debug("%s failed: %s", getattr(fn, "__name__", fn), exc)
            return None
        if np.isnan(value):
            return None
        return value

    def _derive(self, fn: Callable[[Any], Any], geom: Any) -> GeometryHandle | None:
        if geom is None:
            return None
        try:
            out = fn(geom)
        except _ENGINE_ERRORS as exc:
            logger.debug("%s failed: %s", getattr(fn, "__name__", fn), exc)
            return None
        if out is None:
            return None
        return GeometryHandle(self, out)


__all__ = ["EngineContext"]
