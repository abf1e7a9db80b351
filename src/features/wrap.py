"""
どこで: `features.wrap`
何を: エンジンハンドル → 呼び出し側オブジェクト（Feature）への包み込み。
なぜ: 種別 id と任意のサブタイプタグから返すクラスを 1 か所で決め、コレクションの
      要素取り出し（常に複製）と派生演算（重心など）が同じ経路を通るようにするため。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from engine.core.errors import OwnershipError
from engine.core.handle import GeometryHandle

from .base import Feature, standard_class

if TYPE_CHECKING:  # pragma: no cover
    from .factory import Factory


def wrap(
    factory: "Factory", handle: GeometryHandle, class_hint: type[Feature] | None = None
) -> Feature:
    """detached ハンドルの所有権を受け取り Feature を返す。

    Parameters
    ----------
    factory : Factory
        返すオブジェクトの Factory。
    handle : GeometryHandle
        包むハンドル（呼び出し後は返り値が所有する）。
    class_hint : type[Feature] | None
        サブタイプタグ。指定時はこのクラスで包み、必要ならエンジン表現を補正する
        （例: LineString の子を LinearRing として返す）。

    Raises
    ------
    TypeError
        種別に対応するクラスが無い（未知の種別）場合。
    OwnershipError
        `handle` が detached でない（所有済み・Feature が保持中・解放済み）場合。
    """
    if not handle.is_detached:
        raise OwnershipError(f"detached でないハンドルは包めません: {handle!r}")
    cls = class_hint if class_hint is not None else standard_class(handle.kind)
    if cls is None or not issubclass(cls, Feature):
        handle.release()
        raise TypeError(f"包めない種別です: {handle!r}")
    geom = handle.geom
    coerced = cls._coerce_geometry(geom)
    if coerced is not geom:
        replaced = handle.context.adopt(coerced)
        handle.release()
        handle = replaced
    return cls(factory, handle)


def wrap_clone(factory: "Factory", geom: Any, tag: type[Feature] | None = None) -> Feature:
    """借用中のジオメトリを複製して包む（親の格納領域を外へ渡さない）。"""
    return wrap(factory, factory.context.clone(geom), tag)


__all__ = ["wrap", "wrap_clone"]
