"""任务引擎 — 任务声明、执行限制、任务组装与调度。

模块组成::

    engine/
    ├── lazy.py       # 延迟值
    ├── task.py       # Task / Quest / AcquireItem
    ├── limit.py      # Limit / Guards / 限制检查
    ├── wanderers.py  # 游荡非战斗事件判定
    ├── route.py      # 任务线组装与路线排序
    ├── partials.py   # 任务组合 (extend / override)
    └── engine.py     # 调度与执行流水线
"""

from .engine import DEFAULT_SETTINGS, SONG_CAP_SKILL, Engine, EngineOptions
from .lazy import Delayed, Lazy, delay, undelay
from .limit import Guard, Guards, Limit, check_limits
from .partials import extend_task, override_task
from .route import get_tasks, order_by_route
from .task import AcquireItem, Quest, Task, quest_step
from .wanderers import (
    DEFAULT_WANDERERS,
    WANDERING_NCS,
    WanderingNCTable,
    last_encounter_was_wandering_nc,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "DEFAULT_WANDERERS",
    "SONG_CAP_SKILL",
    "WANDERING_NCS",
    "AcquireItem",
    "Delayed",
    "Engine",
    "EngineOptions",
    "Guard",
    "Guards",
    "Lazy",
    "Limit",
    "Quest",
    "Task",
    "WanderingNCTable",
    "check_limits",
    "delay",
    "extend_task",
    "get_tasks",
    "last_encounter_was_wandering_nc",
    "order_by_route",
    "override_task",
    "quest_step",
    "undelay",
]
