"""配置管理 — 基于 Pydantic v2。

配置从 YAML 文件加载，经过 Pydantic 校验后生成不可变的配置对象。

使用方式::

    from grimoire.infra.config import ConfigManager

    config = ConfigManager.load("grimoire.yaml")
    engine = Engine(tasks, session=session, settings=settings, config=config)
"""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator

from .file_utils import load_yaml, merge_dicts, save_yaml


# ── 子配置模型 ──


class LogConfig(BaseModel):
    """日志配置。"""

    model_config = {"frozen": True}

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    """日志级别"""
    root: Path = Path("log")
    """日志保存根目录"""
    dir: Path | None = None
    """日志保存路径。自动按时间生成"""
    rotation: str = "10 MB"
    retention: str = "7 days"

    @model_validator(mode="after")
    def _set_log_dir(self) -> LogConfig:
        if self.dir is None:
            ts = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            object.__setattr__(self, "dir", self.root / ts)
        return self


# ── 顶层配置 ──


class EngineConfig(BaseModel):
    """任务引擎配置（顶层聚合）。"""

    model_config = {"frozen": True}

    combat_script: str | None = None
    """自定义战斗脚本名。设置后写入 ``customCombatScript``"""
    allow_partial_outfit: bool = False
    """装备声明无法完全满足时是否继续执行（仅记录警告）"""
    settings: dict[str, Any] = Field(default_factory=dict)
    """额外的设置覆盖项，与内置启动设置表合并（本项优先）"""
    log: LogConfig = Field(default_factory=LogConfig)

    @field_validator("combat_script")
    @classmethod
    def _validate_combat_script(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("combat_script 不能为空字符串")
        return v

    @field_validator("settings")
    @classmethod
    def _validate_settings(cls, v: dict[str, Any]) -> dict[str, Any]:
        for key, value in v.items():
            if not isinstance(value, (str, int, float, bool)):
                raise ValueError(f"设置项 {key} 的值必须为标量，实际为 {type(value).__name__}")
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """从 YAML 文件加载配置。"""
        data = load_yaml(path)
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """保存为 YAML 文件（日志目录按需重新生成，不写出）。"""
        data = self.model_dump(mode="json", exclude={"log": {"dir"}})
        save_yaml(data, path)


# ── ConfigManager ──


class ConfigManager:
    """配置管理器 — 提供加载入口。"""

    @staticmethod
    def load(path: str | Path, overrides: dict[str, Any] | None = None) -> EngineConfig:
        """从文件加载引擎配置。

        文件不存在时使用默认配置；*overrides* 深度合并在文件内容之上。
        """
        path = Path(path)
        if path.exists():
            data = load_yaml(path)
            logger.info("已加载配置: {}", path)
        else:
            logger.warning("配置文件 {} 不存在，使用默认配置", path)
            data = {}
        if overrides:
            data = merge_dicts(data, overrides)
        return EngineConfig.model_validate(data)
