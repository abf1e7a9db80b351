"""
どこで: `features.convert`
何を: 呼び出し側の要素 → detached なエンジンハンドル（＋任意のサブタイプタグ）への変換。
なぜ: コレクション構築が受け付ける入力（ハンドル/Feature/Shapely ジオメトリ）と、
      所有済みハンドルの再利用禁止をここで一元的に判定するため。

受け付ける要素:
- `GeometryHandle`: detached のものだけ。所有権はそのまま構築側へ移る（消費される）。
  所有済み/解放済みは `InvalidElementError`。
- `Feature`: ジオメトリを複製した新しいハンドルを返す（呼び出し側のオブジェクトはそのまま）。
  標準クラスより狭いクラス（`Line`、MultiLineString に入れた `LinearRing` など）ならタグを返す。
- Shapely ジオメトリ: 新しいハンドルで包む（タグなし）。

種別の制約:
- 期待種別 None（GeometryCollection）は任意。
- LINE_STRING を期待する場所の LINEAR_RING は LineString へ変換して受け付ける。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import shapely
from shapely.errors import GEOSException

from engine.core.errors import EngineError
from engine.core.handle import GeometryHandle
from engine.core.kinds import GeometryKind

from .base import Feature, standard_class
from .errors import InvalidElementError

if TYPE_CHECKING:  # pragma: no cover
    from engine.core.context import EngineContext

    from .factory import Factory


def _check_kind(kind: GeometryKind | None, expected: GeometryKind | None) -> None:
    if kind is None:
        raise InvalidElementError("種別を判定できない要素です")
    if expected is None:
        return
    if expected is GeometryKind.LINE_STRING and kind.is_linear:
        return
    if kind is not expected:
        raise InvalidElementError(f"{expected.name} を期待しましたが {kind.name} が渡されました")


def _needs_line_cast(kind: GeometryKind | None, expected: GeometryKind | None) -> bool:
    return expected is GeometryKind.LINE_STRING and kind is GeometryKind.LINEAR_RING


def _as_line_string(geom: Any) -> Any:
    return shapely.LineString(shapely.get_coordinates(geom, include_z=bool(shapely.has_z(geom))))


def _from_handle(
    handle: GeometryHandle, ctx: "EngineContext", expected: GeometryKind | None
) -> GeometryHandle:
    if handle.is_released:
        raise InvalidElementError("解放済みのハンドルは使えません")
    if handle.owner is not None:
        raise InvalidElementError("他のコレクションが所有しているハンドルは使えません")
    if handle.is_claimed:
        raise InvalidElementError("Feature が保持しているハンドルは使えません")
    kind = handle.kind
    _check_kind(kind, expected)
    if handle.context is ctx and not _needs_line_cast(kind, expected):
        return handle
    # 別表現/別コンテキストへ移す: 新しいハンドルを作ってから元を消費する
    geom = _as_line_string(handle.geom) if _needs_line_cast(kind, expected) else handle.geom
    replaced = ctx.clone(geom)
    handle.release()
    return replaced


def to_detached_handle(
    element: Any, factory: "Factory", expected: GeometryKind | None
) -> tuple[GeometryHandle, type[Feature] | None]:
    """要素を detached ハンドルへ変換する。

    Returns
    -------
    tuple[GeometryHandle, type[Feature] | None]
        `(handle, subtype_tag)`。タグは無ければ None。

    Raises
    ------
    InvalidElementError
        型違い・所有済み/解放済み・変換不能の場合（`index` は未設定）。
    """
    ctx = factory.context
    try:
        if isinstance(element, GeometryHandle):
            return _from_handle(element, ctx, expected), None

        if isinstance(element, Feature):
            if element.is_released:
                raise InvalidElementError("解放済みのオブジェクトは使えません")
            geom = element._geom
            kind = ctx.kind(geom)
            _check_kind(kind, expected)
            if _needs_line_cast(kind, expected):
                handle = ctx.adopt(_as_line_string(geom))
                kind = GeometryKind.LINE_STRING
            else:
                handle = ctx.clone(geom)
            tag = type(element) if type(element) is not standard_class(kind) else None
            return handle, tag

        if isinstance(element, shapely.Geometry):
            kind = ctx.kind(element)
            _check_kind(kind, expected)
            geom = _as_line_string(element) if _needs_line_cast(kind, expected) else element
            return ctx.adopt(geom), None
    except (EngineError, GEOSException) as exc:
        raise InvalidElementError(f"要素を変換できません: {exc}") from exc

    raise InvalidElementError(f"ジオメトリに変換できない要素です: {type(element).__name__}")


__all__ = ["to_detached_handle"]
