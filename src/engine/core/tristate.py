"""
どこで: `engine.core.tristate`
何を: 三値の結果型 `Equality`（構造比較）と `Tristate`（relate/閉路判定）。
なぜ: 「判定不能（UNKNOWN）」を False と取り違えないよう、暗黙の bool 変換を禁止した列挙で表すため。

使い方:
    res = geometries_equal(ctx, a, b, check_z=False)
    if res is Equality.EQUAL: ...
    if res is Equality.UNKNOWN: ...   # 「等しくない」ではなく「分からない」

    bool(res)  # -> TypeError（誤って if res: と書いた場合に即座に気付ける）
"""

from __future__ import annotations

from enum import Enum


class _NoBool(Enum):
    def __bool__(self) -> bool:
        raise TypeError(
            f"{type(self).__name__} は bool に変換できません（UNKNOWN を明示的に扱ってください）"
        )


class Equality(_NoBool):
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    UNKNOWN = "unknown"

    @classmethod
    def from_bool(cls, value: bool | None) -> "Equality":
        if value is None:
            return cls.UNKNOWN
        return cls.EQUAL if value else cls.NOT_EQUAL

    @property
    def is_determinate(self) -> bool:
        return self is not Equality.UNKNOWN


class Tristate(_NoBool):
    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    @classmethod
    def from_bool(cls, value: bool | None) -> "Tristate":
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE

    def to_optional(self) -> bool | None:
        """TRUE/FALSE を bool に、UNKNOWN を None に写す。"""
        if self is Tristate.UNKNOWN:
            return None
        return self is Tristate.TRUE


__all__ = ["Equality", "Tristate"]
