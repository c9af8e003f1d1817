"""战斗系统 — 作战策略与宏编译。

模块组成::

    combat/
    ├── macro.py      # 字面战斗宏构造器
    └── strategy.py   # 作战策略、资源分配、分支压缩编译

典型使用::

    from grimoire.combat import CombatStrategy, CombatResources

    resources = CombatResources()
    macro = task.combat.clone().compile(resources, defaults, location)
"""

from .macro import Macro
from .strategy import (
    ActionDefaults,
    CombatResource,
    CombatResources,
    CombatStrategy,
    CompressedMacro,
    DelayedMacro,
    StrategyEntry,
)

__all__ = [
    "ActionDefaults",
    "CombatResource",
    "CombatResources",
    "CombatStrategy",
    "CompressedMacro",
    "DelayedMacro",
    "Macro",
    "StrategyEntry",
]
