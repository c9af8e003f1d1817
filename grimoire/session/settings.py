"""持久化设置 — 键值存储接口与临时覆盖管理。

``SettingsStore`` 是外部设置存储的最小契约 (``get`` / ``set``)；
``PropertiesManager`` 在其上记录被覆盖项的原值，供引擎析构时统一恢复。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from loguru import logger


class SettingsStore(ABC):
    """键值设置存储抽象基类。"""

    @abstractmethod
    def get(self, key: str, default: Any = "") -> Any:
        """读取设置，不存在时返回 *default*。"""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """写入设置。"""
        ...


class MemorySettings(SettingsStore):
    """基于字典的内存实现。"""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = "") -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"MemorySettings({len(self._data)} keys)"


class PropertiesManager:
    """临时设置覆盖管理器。

    同一个键被多次覆盖时只记录第一次的原值，``reset_all`` 恢复到覆盖前的状态。
    """

    def __init__(self, store: SettingsStore) -> None:
        self._store = store
        self._originals: dict[str, Any] = {}

    def set(self, properties: Mapping[str, Any]) -> None:
        """批量覆盖设置。"""
        for key, value in properties.items():
            if key not in self._originals:
                self._originals[key] = self._store.get(key, None)
            self._store.set(key, value)

    def set_choices(self, choices: Mapping[int, int]) -> None:
        """覆盖选项事件的默认选择 (``choiceAdventure{id}``)。"""
        self.set({f"choiceAdventure{choice_id}": option for choice_id, option in choices.items()})

    def reset(self, *keys: str) -> None:
        """恢复指定键。"""
        for key in keys:
            if key in self._originals:
                self._restore(key, self._originals.pop(key))

    def reset_all(self) -> None:
        """恢复全部被覆盖的键。"""
        for key, value in self._originals.items():
            self._restore(key, value)
        logger.debug("已恢复 {} 项设置", len(self._originals))
        self._originals.clear()

    @property
    def overridden(self) -> list[str]:
        """当前被覆盖的键。"""
        return list(self._originals)

    def _restore(self, key: str, value: Any) -> None:
        self._store.set(key, "" if value is None else value)
