"""
どこで: `common.settings`
何を: プロジェクトの環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: Factory の既定値（Z/M 次元・MultiPolygon 検証の省略）を 1 か所で決め、テストから差し替えやすくするため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_choice

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class _Settings:
    # Factory 既定値
    LENIENT_MULTI_POLYGON: bool = False
    DEFAULT_HAS_Z: bool = False
    DEFAULT_HAS_M: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - bool は `env_bool`、ログレベルは `env_choice`（候補外は INFO）を使用。
    """
    _settings.LENIENT_MULTI_POLYGON = env_bool("PXG_LENIENT_MULTI_POLYGON", False)
    _settings.DEFAULT_HAS_Z = env_bool("PXG_DEFAULT_HAS_Z", False)
    _settings.DEFAULT_HAS_M = env_bool("PXG_DEFAULT_HAS_M", False)
    _settings.LOG_LEVEL = env_choice("PXG_LOG_LEVEL", "INFO", choices=_LOG_LEVELS) or "INFO"


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
