"""
どこで: `engine.core.handle`
何を: エンジン所有のジオメトリ資源 `GeometryHandle` と、組立中のハンドルを束ねる `HandleBuffer`。
なぜ: 「所有者は常に 1 つ」「破棄はちょうど 1 回」をオブジェクトの状態として表し、
      コレクション構築の途中失敗で資源が残らないことをスコープで保証するため。

所有モデル（不変条件）:
- 生成直後のハンドルは detached（`owner is None`）。
- コレクション組立に成功すると、要素ハンドルの所有権は親ハンドルへ移る（`owner is parent`）。
  以後、要素ハンドルを単独で `release()` することはできない（`OwnershipError`）。
- 親ハンドルの解放は、移譲された要素ハンドルを再帰的に解放する。
- 解放済みハンドルへのアクセス/二重解放は `HandleReleasedError`。
- Feature が包んだハンドルは claimed になり detached ではなくなる（組立に使えない）。
  破棄は `release_claimed()`（Feature.release 経由）でのみ行う。

`HandleBuffer` はコンテキストマネージャとして使い、抜けるときに「まだ detached のまま」の
ハンドルをすべて解放する。組立に成功して所有権が移ったハンドルは対象外になるため、
成功/失敗どちらの経路でも手書きのロールバックは不要になる。

    with HandleBuffer(ctx) as buf:
        for elem in elements:
            buf.append(convert(elem))          # 途中で例外 → それまでの分は自動解放
        parent = ctx.create_collection(kind, buf.handles)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Sequence

from .errors import HandleReleasedError, OwnershipError
from .kinds import GeometryKind

if TYPE_CHECKING:  # pragma: no cover
    from .context import EngineContext


class GeometryHandle:
    """エンジン所有のジオメトリ 1 個への参照。

    `geom` は Shapely のジオメトリ（不変）。ハンドルはその寿命と所有者を管理する。
    """

    __slots__ = ("_context", "_geom", "_owner", "_parts", "_released", "_claimed")

    def __init__(self, context: "EngineContext", geom: Any) -> None:
        self._context = context
        self._geom = geom
        self._owner: GeometryHandle | None = None
        self._parts: tuple[GeometryHandle, ...] = ()
        self._released = False
        self._claimed = False
        context._track(self)

    # ── 状態 ───────────────────
    @property
    def context(self) -> "EngineContext":
        return self._context

    @property
    def geom(self) -> Any:
        if self._released:
            raise HandleReleasedError("解放済みのハンドルにはアクセスできません")
        return self._geom

    @property
    def owner(self) -> "GeometryHandle | None":
        return self._owner

    @property
    def parts(self) -> tuple["GeometryHandle", ...]:
        """組立時に所有権を受け取った要素ハンドル（読み取り専用）。"""
        return self._parts

    @property
    def is_released(self) -> bool:
        return self._released

    @property
    def is_claimed(self) -> bool:
        """Feature が保持しているか。"""
        return self._claimed

    @property
    def is_detached(self) -> bool:
        """コレクションにも Feature にも所有されておらず、まだ生きているか。"""
        return self._owner is None and not self._claimed and not self._released

    @property
    def kind(self) -> GeometryKind | None:
        return self._context.kind(self.geom)

    # ── 寿命 ───────────────────
    def release(self) -> None:
        """ハンドルを破棄する（所有権を持つ呼び出し側のみ）。"""
        if self._released:
            raise HandleReleasedError("ハンドルは既に解放されています")
        if self._owner is not None:
            raise OwnershipError("コレクションが所有しているハンドルは単独で解放できません")
        if self._claimed:
            raise OwnershipError("Feature が保持しているハンドルは Feature.release() で解放してください")
        self._destroy()

    def claim(self) -> None:
        """Feature が所有権を受け取る（detached のハンドルのみ）。"""
        if not self.is_detached:
            raise OwnershipError("detached でないハンドルは Feature で包めません")
        self._claimed = True

    def release_claimed(self) -> None:
        """Feature が保持しているハンドルを破棄する。"""
        if self._released:
            raise HandleReleasedError("ハンドルは既に解放されています")
        if not self._claimed:
            raise OwnershipError("Feature が保持していないハンドルです")
        self._claimed = False
        self._destroy()

    def _destroy(self) -> None:
        for part in self._parts:
            if not part._released:
                part._destroy()
        self._parts = ()
        self._geom = None
        self._released = True
        self._context._untrack(self)

    def _adopt_parts(self, parts: Sequence["GeometryHandle"]) -> None:
        for part in parts:
            if not part.is_detached:
                raise OwnershipError("既に所有されている（または解放済みの）ハンドルは移譲できません")
        for part in parts:
            part._owner = self
        self._parts = tuple(parts)

    def __repr__(self) -> str:
        if self._released:
            return "GeometryHandle(<released>)"
        state = "owned" if self._owner is not None else ("held" if self._claimed else "detached")
        kind = self.kind
        name = kind.name if kind is not None else "?"
        return f"GeometryHandle({name}, {state})"


class HandleBuffer:
    """組立中のハンドルを保持するスコープ付きコンテナ。

    抜けるとき（正常/例外とも）に、保持中で detached のハンドルをすべて解放する。
    """

    def __init__(self, context: "EngineContext") -> None:
        self._context = context
        self._handles: list[GeometryHandle] = []

    def __enter__(self) -> "HandleBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release_all()
        return False

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[GeometryHandle]:
        return iter(tuple(self._handles))

    @property
    def handles(self) -> tuple[GeometryHandle, ...]:
        return tuple(self._handles)

    def append(self, handle: GeometryHandle) -> None:
        if not handle.is_detached:
            raise OwnershipError("バッファには detached のハンドルのみ追加できます")
        if handle.context is not self._context:
            raise OwnershipError("異なるエンジンコンテキストのハンドルは混在できません")
        if any(h is handle for h in self._handles):
            raise OwnershipError("同じハンドルを 2 回追加することはできません")
        self._handles.append(handle)

    def release_all(self) -> int:
        """保持中で detached のハンドルを解放し、その数を返す。"""
        released = 0
        for handle in self._handles:
            if handle.is_detached:
                handle.release()
                released += 1
        self._handles.clear()
        return released


__all__ = ["GeometryHandle", "HandleBuffer"]
