from __future__ import annotations

import pytest
import shapely

from engine.core import COLLECTION_KINDS, Equality, GeometryKind, Tristate, element_kind_for


def test_kind_values_match_engine_type_ids() -> None:
    samples = {
        GeometryKind.POINT: shapely.Point(0, 0),
        GeometryKind.LINE_STRING: shapely.LineString([(0, 0), (1, 1)]),
        GeometryKind.LINEAR_RING: shapely.LinearRing([(0, 0), (1, 0), (1, 1)]),
        GeometryKind.POLYGON: shapely.box(0, 0, 1, 1),
        GeometryKind.MULTI_POINT: shapely.MultiPoint([(0, 0)]),
        GeometryKind.MULTI_LINE_STRING: shapely.MultiLineString([[(0, 0), (1, 1)]]),
        GeometryKind.MULTI_POLYGON: shapely.MultiPolygon([shapely.box(0, 0, 1, 1)]),
        GeometryKind.GEOMETRY_COLLECTION: shapely.GeometryCollection([shapely.Point(0, 0)]),
    }
    for kind, geom in samples.items():
        assert int(shapely.get_type_id(geom)) == kind


def test_from_id_unknown_is_none() -> None:
    assert GeometryKind.from_id(3) is GeometryKind.POLYGON
    assert GeometryKind.from_id(-1) is None
    assert GeometryKind.from_id(99) is None


def test_collection_kinds_and_element_kinds() -> None:
    assert len(COLLECTION_KINDS) == 4
    assert GeometryKind.MULTI_POLYGON.is_collection
    assert not GeometryKind.POLYGON.is_collection
    assert GeometryKind.LINEAR_RING.is_linear
    assert element_kind_for(GeometryKind.GEOMETRY_COLLECTION) is None
    assert element_kind_for(GeometryKind.MULTI_POINT) is GeometryKind.POINT
    assert element_kind_for(GeometryKind.MULTI_LINE_STRING) is GeometryKind.LINE_STRING
    assert element_kind_for(GeometryKind.MULTI_POLYGON) is GeometryKind.POLYGON
    with pytest.raises(ValueError):
        element_kind_for(GeometryKind.POINT)


@pytest.mark.parametrize("value", list(Equality) + list(Tristate))
def test_tristate_values_refuse_bool(value) -> None:
    with pytest.raises(TypeError):
        bool(value)


def test_from_bool_and_to_optional() -> None:
    assert Equality.from_bool(True) is Equality.EQUAL
    assert Equality.from_bool(False) is Equality.NOT_EQUAL
    assert Equality.from_bool(None) is Equality.UNKNOWN
    assert not Equality.UNKNOWN.is_determinate
    assert Equality.NOT_EQUAL.is_determinate

    assert Tristate.from_bool(True).to_optional() is True
    assert Tristate.from_bool(False).to_optional() is False
    assert Tristate.UNKNOWN.to_optional() is None
