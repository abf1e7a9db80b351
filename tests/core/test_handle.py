from __future__ import annotations

import pytest
import shapely

from engine.core import (
    EngineContext,
    GeometryKind,
    HandleBuffer,
    HandleReleasedError,
    OwnershipError,
)

# What this tests
# - 生成直後は detached、release で live_handles が減る。
# - 二重解放/解放後アクセスは HandleReleasedError。
# - 組立後の要素ハンドルは owned になり、単独 release は OwnershipError。
# - 親の release が要素ハンドルを再帰的に解放する。
# - HandleBuffer は抜けるときに detached のハンドルだけを解放する。
# - claim したハンドルは detached ではなく、release_claimed でのみ破棄できる。


def _pt(x: float = 0.0, y: float = 0.0):
    return shapely.Point(x, y)


def test_adopt_and_release_updates_live_count() -> None:
    ctx = EngineContext()
    h = ctx.adopt(_pt())
    assert ctx.live_handles == 1
    assert h.is_detached and h.owner is None
    assert h.kind is GeometryKind.POINT

    h.release()
    assert h.is_released and not h.is_detached
    assert ctx.live_handles == 0


def test_double_release_and_access_after_release_raise() -> None:
    ctx = EngineContext()
    h = ctx.adopt(_pt())
    h.release()
    with pytest.raises(HandleReleasedError):
        h.release()
    with pytest.raises(HandleReleasedError):
        _ = h.geom
    assert "released" in repr(h)


def test_adopt_rejects_non_geometry() -> None:
    ctx = EngineContext()
    with pytest.raises(TypeError):
        ctx.adopt([0.0, 0.0])
    assert ctx.live_handles == 0


def test_collection_takes_ownership_of_parts() -> None:
    ctx = EngineContext()
    parts = [ctx.adopt(_pt(i, i)) for i in range(3)]
    parent = ctx.create_collection(GeometryKind.MULTI_POINT, parts)

    assert ctx.live_handles == 4
    assert parent.parts == tuple(parts)
    for p in parts:
        assert p.owner is parent
        assert not p.is_detached
        with pytest.raises(OwnershipError):
            p.release()

    parent.release()
    assert ctx.live_handles == 0
    assert all(p.is_released for p in parts)


def test_owned_handle_cannot_be_assembled_twice() -> None:
    ctx = EngineContext()
    a = ctx.adopt(_pt())
    parent = ctx.create_collection(GeometryKind.MULTI_POINT, [a])
    with pytest.raises(OwnershipError):
        ctx.create_collection(GeometryKind.MULTI_POINT, [a])
    parent.release()


def test_handles_from_another_context_are_rejected() -> None:
    ctx1 = EngineContext("a")
    ctx2 = EngineContext("b")
    h = ctx2.adopt(_pt())
    with pytest.raises(OwnershipError):
        ctx1.create_collection(GeometryKind.MULTI_POINT, [h])
    with HandleBuffer(ctx1) as buf:
        with pytest.raises(OwnershipError):
            buf.append(h)
    assert h.is_detached
    h.release()


def test_buffer_releases_detached_handles_on_error() -> None:
    ctx = EngineContext()
    with pytest.raises(RuntimeError):
        with HandleBuffer(ctx) as buf:
            buf.append(ctx.adopt(_pt()))
            buf.append(ctx.adopt(_pt(1, 1)))
            assert len(buf) == 2
            raise RuntimeError("boom")
    assert ctx.live_handles == 0


def test_buffer_skips_handles_owned_by_a_parent() -> None:
    ctx = EngineContext()
    with HandleBuffer(ctx) as buf:
        buf.append(ctx.adopt(_pt()))
        buf.append(ctx.adopt(_pt(2, 0)))
        parent = ctx.create_collection(GeometryKind.MULTI_POINT, buf.handles)
    # 所有権が移った要素は解放されない
    assert ctx.live_handles == 3
    assert all(not h.is_released for h in parent.parts)
    parent.release()
    assert ctx.live_handles == 0


def test_buffer_release_all_returns_count() -> None:
    ctx = EngineContext()
    buf = HandleBuffer(ctx)
    buf.append(ctx.adopt(_pt()))
    buf.append(ctx.adopt(_pt(1, 0)))
    assert buf.release_all() == 2
    assert len(buf) == 0
    assert ctx.live_handles == 0


def test_empty_collection_can_be_created() -> None:
    ctx = EngineContext()
    for kind in (
        GeometryKind.GEOMETRY_COLLECTION,
        GeometryKind.MULTI_POINT,
        GeometryKind.MULTI_LINE_STRING,
        GeometryKind.MULTI_POLYGON,
    ):
        h = ctx.create_collection(kind, [])
        assert h.kind is kind
        assert ctx.child_count(h.geom) == 0
        h.release()
    assert ctx.live_handles == 0


def test_create_collection_rejects_non_collection_kind() -> None:
    ctx = EngineContext()
    with pytest.raises(ValueError):
        ctx.create_collection(GeometryKind.POLYGON, [])


def test_claimed_handle_is_not_detached() -> None:
    ctx = EngineContext()
    h = ctx.adopt(_pt())
    h.claim()
    assert h.is_claimed and not h.is_detached
    assert "held" in repr(h)
    with pytest.raises(OwnershipError):
        h.claim()
    with pytest.raises(OwnershipError):
        h.release()
    with pytest.raises(OwnershipError):
        ctx.create_collection(GeometryKind.MULTI_POINT, [h])
    with HandleBuffer(ctx) as buf:
        with pytest.raises(OwnershipError):
            buf.append(h)
    assert not h.is_released

    h.release_claimed()
    assert h.is_released
    assert ctx.live_handles == 0
    with pytest.raises(HandleReleasedError):
        h.release_claimed()


def test_release_claimed_requires_claim() -> None:
    ctx = EngineContext()
    h = ctx.adopt(_pt())
    with pytest.raises(OwnershipError):
        h.release_claimed()
    h.release()
