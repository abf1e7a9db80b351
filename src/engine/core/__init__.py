"""
どこで: `engine.core` サブパッケージ。
何を: エンジンコンテキスト・ハンドル寿命管理・種別列挙・三値結果・構造比較・MultiPolygon 検証を提供。
なぜ: Shapely（GEOS）との境界をここに集約し、上位層（features/api）から再利用可能にするため。
"""

from .context import EngineContext
from .errors import AssemblyError, EngineError, HandleReleasedError, OwnershipError
from .handle import GeometryHandle, HandleBuffer
from .kinds import COLLECTION_KINDS, GeometryKind, element_kind_for
from .tristate import Equality, Tristate

__all__ = [
    "EngineContext",
    "GeometryHandle",
    "HandleBuffer",
    "GeometryKind",
    "COLLECTION_KINDS",
    "element_kind_for",
    "Equality",
    "Tristate",
    "EngineError",
    "AssemblyError",
    "HandleReleasedError",
    "OwnershipError",
]
