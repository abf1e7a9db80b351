"""共通フィクスチャ。

- 設定（環境変数）に依存しない Factory（検証あり/なし、Z あり）
- 小さな Polygon / LineString 試料
"""

from __future__ import annotations

from typing import Callable, Iterator

import pytest

from common import settings
from features import Factory, Polygon


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """PXG_* 環境変数を除去して既定設定で走らせる。"""
    for name in (
        "PXG_LENIENT_MULTI_POLYGON",
        "PXG_DEFAULT_HAS_Z",
        "PXG_DEFAULT_HAS_M",
        "PXG_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings.reload_from_env()
    yield
    settings.reload_from_env()


@pytest.fixture()
def factory() -> Factory:
    return Factory(has_z=False, has_m=False, lenient_multi_polygon_assertions=False)


@pytest.fixture()
def lenient_factory() -> Factory:
    return Factory(has_z=False, has_m=False, lenient_multi_polygon_assertions=True)


@pytest.fixture()
def factory_z() -> Factory:
    return Factory(has_z=True, has_m=False, lenient_multi_polygon_assertions=False)


@pytest.fixture()
def square(factory: Factory) -> Callable[..., Polygon]:
    """左下 (x, y)・一辺 size の正方形を返す。"""

    def make(x: float, y: float, size: float = 1.0, f: Factory | None = None) -> Polygon:
        f = f or factory
        return f.polygon(
            [(x, y), (x + size, y), (x + size, y + size), (x, y + size), (x, y)]
        )

    return make
