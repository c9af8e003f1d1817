"""基础设施层 — 日志、配置、异常体系、文件工具。"""

from .config import ConfigManager, EngineConfig, LogConfig
from .exceptions import (
    AcquisitionError,
    ConfigurationError,
    DressVerificationError,
    EffectCapExceededError,
    EquipError,
    GrimoireError,
    LimitExceededError,
    MaximizationError,
    OutfitError,
    TaskPartialError,
)
from .file_utils import load_yaml, merge_dicts, save_yaml
from .logger import configure_logging, setup_logger

__all__ = [
    # config
    "ConfigManager",
    "EngineConfig",
    "LogConfig",
    # exceptions
    "AcquisitionError",
    "ConfigurationError",
    "DressVerificationError",
    "EffectCapExceededError",
    "EquipError",
    "GrimoireError",
    "LimitExceededError",
    "MaximizationError",
    "OutfitError",
    "TaskPartialError",
    # file_utils
    "load_yaml",
    "merge_dicts",
    "save_yaml",
    # logger
    "configure_logging",
    "setup_logger",
]
