from __future__ import annotations

import pytest
import shapely

from features import (
    CollectionConstructionError,
    Factory,
    GeometryCollection,
    InvalidArrangementError,
    InvalidElementError,
    Line,
    LinearRing,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
)

# What this tests (構築)
# - 要素数 n の構築で size == n、空の構築は size == 0。
# - 途中の要素で失敗したとき index が立ち、資源が残らない（live_handles が戻る）。
# - 所有済み・Feature が保持中のハンドルは拒否、detached ハンドルは消費される。
# - MultiPolygon の位相検証（重なり/辺共有は失敗、点接触は成功、lenient で省略）。
# - サブタイプタグは疎（全て None なら None）。


def test_size_matches_number_of_elements(factory: Factory) -> None:
    pts = [factory.point(i, 0) for i in range(5)]
    mp = factory.multi_point(pts)
    assert isinstance(mp, MultiPoint)
    assert mp.size() == 5
    assert mp.num_geometries() == 5
    assert len(mp) == 5


@pytest.mark.parametrize(
    "build",
    ["collection", "multi_point", "multi_line_string", "multi_polygon"],
)
def test_empty_construction(factory: Factory, build: str) -> None:
    coll = getattr(factory, build)([])
    assert coll.size() == 0
    assert coll.is_empty
    assert coll.subtype_tags is None
    assert list(coll) == []


def test_accepts_generators_and_shapely_geometries(factory: Factory) -> None:
    coll = factory.collection(g for g in [shapely.Point(0, 0), shapely.box(0, 0, 1, 1)])
    assert isinstance(coll, GeometryCollection)
    assert coll.size() == 2


def test_heterogeneous_collection(factory: Factory, square) -> None:
    coll = GeometryCollection.create(
        factory,
        [factory.point(0, 0), factory.line_string([(0, 0), (1, 1)]), square(3, 3)],
    )
    assert [type(e).__name__ for e in coll] == ["Point", "LineString", "Polygon"]


def test_kind_mismatch_reports_index_and_releases_everything(factory: Factory, square) -> None:
    ctx = factory.context
    before = ctx.live_handles
    elements = [square(0, 0), square(2, 0), factory.point(9, 9), square(4, 0)]
    owned_by_caller = ctx.live_handles
    with pytest.raises(InvalidElementError) as ei:
        factory.multi_polygon(elements)
    assert ei.value.index == 2
    assert isinstance(ei.value, CollectionConstructionError)
    # 呼び出し側のオブジェクトはそのまま、構築途中の複製は残らない
    assert ctx.live_handles == owned_by_caller
    assert not any(e.is_released for e in elements)
    for e in elements:
        e.release()
    assert ctx.live_handles == before


def test_unsupported_element_type(factory: Factory) -> None:
    with pytest.raises(InvalidElementError) as ei:
        factory.collection([factory.point(0, 0), "POINT (1 1)"])
    assert ei.value.index == 1


def test_detached_handles_are_consumed(factory: Factory) -> None:
    ctx = factory.context
    handles = [factory.adopt(shapely.Point(i, i)) for i in range(3)]
    mp = factory.multi_point(handles)
    assert all(h.owner is not None for h in handles)
    assert ctx.live_handles == 4
    mp.release()
    assert ctx.live_handles == 0


def test_consumed_handles_are_released_on_failure(factory: Factory) -> None:
    ctx = factory.context
    good = factory.adopt(shapely.Point(0, 0))
    bad = factory.adopt(shapely.box(0, 0, 1, 1))
    with pytest.raises(InvalidElementError) as ei:
        factory.multi_point([good, bad])
    assert ei.value.index == 1
    assert good.is_released
    # 失敗した要素は受理されていないので呼び出し側が所有したまま
    assert bad.is_detached
    bad.release()
    assert ctx.live_handles == 0


def test_owned_handle_is_rejected(factory: Factory) -> None:
    h = factory.adopt(shapely.Point(0, 0))
    first = factory.multi_point([h])
    with pytest.raises(InvalidElementError) as ei:
        factory.multi_point([factory.adopt(shapely.Point(1, 1)), h])
    assert ei.value.index == 1
    # 最初のコレクションは影響を受けない
    assert first.size() == 1
    assert not h.is_released


def test_released_elements_are_rejected(factory: Factory) -> None:
    p = factory.point(0, 0)
    p.release()
    with pytest.raises(InvalidElementError) as ei:
        factory.multi_point([factory.point(1, 1), p])
    assert ei.value.index == 1

    h = factory.adopt(shapely.Point(0, 0))
    h.release()
    with pytest.raises(InvalidElementError):
        factory.multi_point([h])


def test_same_handle_twice_is_rejected(factory: Factory) -> None:
    ctx = factory.context
    h = factory.adopt(shapely.Point(0, 0))
    with pytest.raises(InvalidElementError) as ei:
        factory.multi_point([h, h])
    assert ei.value.index == 1
    assert h.is_released
    assert ctx.live_handles == 0


def test_overlapping_polygons_fail_when_strict(factory: Factory, square) -> None:
    ctx = factory.context
    a, b = square(0, 0, 2), square(1, 1, 2)
    live = ctx.live_handles
    with pytest.raises(InvalidArrangementError) as ei:
        factory.multi_polygon([a, b])
    assert ei.value.pair == (1, 0)
    assert ei.value.index == 1
    assert ctx.live_handles == live


def test_overlapping_polygons_pass_when_lenient(lenient_factory: Factory, square) -> None:
    a = square(0, 0, 2, lenient_factory)
    b = square(1, 1, 2, lenient_factory)
    mp = lenient_factory.multi_polygon([a, b])
    assert isinstance(mp, MultiPolygon)
    assert mp.size() == 2


def test_shared_edge_fails(factory: Factory, square) -> None:
    with pytest.raises(InvalidArrangementError) as ei:
        factory.multi_polygon([square(0, 0), square(1, 0)])
    assert ei.value.pair == (1, 0)


def test_point_touching_polygons_pass(factory: Factory, square) -> None:
    mp = factory.multi_polygon([square(0, 0), square(1, 1)])
    assert mp.size() == 2


def test_subtype_tags_are_sparse(factory: Factory) -> None:
    plain = factory.multi_line_string(
        [factory.line_string([(0, 0), (1, 0)]), factory.line_string([(0, 1), (1, 1)])]
    )
    assert plain.subtype_tags is None

    tagged = factory.multi_line_string(
        [
            factory.line_string([(0, 0), (1, 0)]),
            factory.line((0, 1), (1, 1)),
            factory.linear_ring([(0, 2), (1, 2), (1, 3), (0, 2)]),
        ]
    )
    assert tagged.subtype_tags == (None, Line, LinearRing)


def test_linear_ring_is_stored_as_line_string(factory: Factory) -> None:
    ring = factory.linear_ring([(0, 0), (1, 0), (1, 1), (0, 0)])
    mls = factory.multi_line_string([ring])
    assert isinstance(mls, MultiLineString)
    child = shapely.get_geometry(mls.to_shapely(), 0)
    assert shapely.get_type_id(child) == 1  # LineString
    # 取り出すとタグに従って LinearRing に戻る
    assert type(mls[0]) is LinearRing
    assert type(factory.multi_line_string([shapely.LinearRing([(0, 0), (1, 0), (1, 1)])])[0]) is LineString


def test_elements_from_another_factory_are_copied(factory: Factory, lenient_factory: Factory) -> None:
    p = lenient_factory.point(1, 2)
    mp = factory.multi_point([p])
    assert mp[0].factory is factory
    assert not p.is_released
    assert lenient_factory.context.live_handles == 1


def test_handle_held_by_feature_is_rejected(factory: Factory) -> None:
    ctx = factory.context
    h = factory.adopt(shapely.Point(1, 2))
    p = factory.wrap(h)
    assert h.is_claimed and not h.is_detached
    with pytest.raises(InvalidElementError) as ei:
        factory.multi_point([factory.adopt(shapely.Point(0, 0)), h])
    assert ei.value.index == 1
    # Feature はそのまま使え、自分で解放できる
    assert (p.x, p.y) == (1.0, 2.0)
    assert ctx.live_handles == 1
    p.release()
    assert h.is_released
    assert ctx.live_handles == 0


def test_handle_held_by_collection_feature_is_rejected(factory: Factory) -> None:
    ctx = factory.context
    h = factory.adopt(shapely.MultiPoint([(0, 0), (1, 1)]))
    mp = factory.wrap(h)
    with pytest.raises(InvalidElementError) as ei:
        factory.collection([h])
    assert ei.value.index == 0
    assert h.owner is None
    assert mp.size() == 2
    mp.release()
    assert ctx.live_handles == 0


def test_held_handle_cannot_be_released_or_rewrapped(factory: Factory) -> None:
    from engine.core import OwnershipError

    h = factory.adopt(shapely.Point(0, 0))
    p = factory.wrap(h)
    with pytest.raises(OwnershipError):
        h.release()
    with pytest.raises(OwnershipError):
        factory.wrap(h)
    assert not p.is_released
    p.release()
