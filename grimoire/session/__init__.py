"""会话层 — 外部协作者接口（游戏会话、设置存储、优化器）。"""

from grimoire.session.base import GameSession
from grimoire.session.maximizer import Maximizer, MaximizerRequest
from grimoire.session.settings import MemorySettings, PropertiesManager, SettingsStore

__all__ = [
    "GameSession",
    "Maximizer",
    "MaximizerRequest",
    "MemorySettings",
    "PropertiesManager",
    "SettingsStore",
]
