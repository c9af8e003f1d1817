"""全局日志配置。

使用方式::

    # 脚本启动时调用一次
    from grimoire.infra.logger import configure_logging
    configure_logging(config.log)

    # 各模块直接使用 loguru
    from loguru import logger
    logger.info("执行任务 {}", task.name)

引擎在执行任务期间通过 ``logger.contextualize(task=...)`` 绑定当前任务名，
输出格式中的 ``{extra[task]}`` 列即来自于此；任务之外为 ``-``。
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from .config import LogConfig

# 项目根目录，用于将绝对路径转换为相对路径
_PROJECT_ROOT = Path(__file__).parent.parent

_FMT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level:8}</level> | "
    "<magenta>{extra[task]}</magenta> | "
    "<cyan>{extra[src]}</cyan> | "
    "{message}"
)

NO_TASK = "-"


def _src_patcher(record: dict) -> None:
    """将 record["file"].path 转为以项目根目录为基准的相对路径，存入 extra["src"]。

    格式示例：``grimoire/engine/engine.py:120``
    """
    try:
        rel = Path(record["file"].path).relative_to(_PROJECT_ROOT)
        record["extra"]["src"] = f"{rel.as_posix()}:{record['line']}"
    except ValueError:
        record["extra"]["src"] = f"{record['file'].name}:{record['line']}"


def setup_logger(
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """配置全局 loguru logger。

    - 控制台：按 *level* 过滤输出。
    - 文件（全量）：始终以 DEBUG 级别记录，文件名含 ``.debug`` 后缀。
    - 文件（过滤）：与控制台 *level* 一致；*level* 为 DEBUG 时不重复创建。

    Parameters
    ----------
    log_dir:
        日志文件存放目录。为 *None* 时仅输出到控制台。
    level:
        控制台及过滤文件的最低日志级别。
    rotation:
        单个日志文件最大体积或时间周期。
    retention:
        日志文件保留时长。
    """
    logger.remove()
    logger.configure(patcher=_src_patcher, extra={"task": NO_TASK})

    logger.add(sys.stderr, level=level, format=_FMT)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    sinks = [("grimoire_{time:YYYY-MM-DD}.debug.log", "DEBUG")]
    if level.upper() != "DEBUG":
        sinks.append(("grimoire_{time:YYYY-MM-DD}.log", level))
    for name, sink_level in sinks:
        logger.add(
            log_dir / name,
            level=sink_level,
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
            format=_FMT,
        )


def configure_logging(config: LogConfig, console_only: bool = False) -> None:
    """按 :class:`LogConfig` 配置日志；*console_only* 时不写文件。"""
    setup_logger(
        log_dir=None if console_only else config.dir,
        level=config.level,
        rotation=config.rotation,
        retention=config.retention,
    )
    logger.debug("日志已配置: level={} dir={}", config.level, config.dir)
