"""
共通レジストリ基底クラス
engine.core.compare の種別ディスパッチ（kind 名 → 比較関数）で使用する名前付きレジストリ。
"""

import re
from typing import Any, Callable


class BaseRegistry:
    """名前付きレジストリ。

    - 文字列キーは正規化されます（大文字小文字・キャメル→スネーク・ハイフンを吸収）。
    - デコレータは複数名を受け付け、同一オブジェクトを複数キーに登録できます。
    - 名前省略時はクラス/関数名から自動推論します。
    """

    def __init__(self):
        self._registry: dict[str, Any] = {}

    # === 内部ユーティリティ ===
    @staticmethod
    def _camel_to_snake(name: str) -> str:
        s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
        s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
        return s2.lower()

    @classmethod
    def _normalize_key(cls, name: str) -> str:
        """レジストリキーの正規化（例: "MultiLineString" -> "multi_line_string"）。"""
        if not isinstance(name, str):
            raise TypeError("レジストリキーは str である必要があります")
        if not name:
            raise ValueError("レジストリキーは空であってはなりません")
        name = name.replace("-", "_")
        # 大文字を含む場合のみキャメル→スネーク変換（"LINE_STRING" のような全大文字は小文字化のみ）
        if name.isupper() or not any(c.isupper() for c in name):
            return name.lower()
        return cls._camel_to_snake(name)

    def register(self, *names: str) -> Callable:
        """クラス/関数をレジストリに登録するデコレータ。"""

        def decorator(obj: Any) -> Any:
            keys = [self._normalize_key(n) for n in names] or [self._normalize_key(obj.__name__)]
            for key in keys:
                if key in self._registry and self._registry[key] is not obj:
                    raise ValueError(f"'{key}' は既に登録されています")
            for key in keys:
                self._registry[key] = obj
            return obj

        return decorator

    def get(self, name: str) -> Any:
        """登録されたクラス/関数を取得（未登録は KeyError）。"""
        key = self._normalize_key(name)
        if key not in self._registry:
            raise KeyError(f"'{name}' は登録されていません")
        return self._registry[key]

    def lookup(self, name: str) -> Any | None:
        """登録されたクラス/関数を取得（未登録は None）。"""
        return self._registry.get(self._normalize_key(name))

    def list_all(self) -> list[str]:
        """登録されているすべての名前を取得（未ソート）。"""
        return list(self._registry.keys())

    def is_registered(self, name: str) -> bool:
        """指定された名前が登録されているかチェック"""
        return self._normalize_key(name) in self._registry

    def unregister(self, name: str) -> None:
        """レジストリから削除（名前が存在しない場合は無視）。"""
        self._registry.pop(self._normalize_key(name), None)

    @property
    def registry(self) -> dict[str, Any]:
        """レジストリの読み取り専用アクセス"""
        return self._registry.copy()
