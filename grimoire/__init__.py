"""grimoire — 声明式任务执行引擎。

从任务列表中挑选下一个未完成的任务，准备其声明的前置条件（物品、状态、
装备、设置），执行，并用尝试次数 / 回合数限制防止失控的重试。

主要入口::

    from grimoire import Engine, Task, OutfitSpec, CombatStrategy

    tasks = get_tasks([quest_a, quest_b])
    with Engine(tasks, session=session, settings=settings, maximizer=maximizer) as engine:
        engine.run()
"""

__version__ = "0.3.33"

from grimoire.combat import CombatResource, CombatResources, CombatStrategy, Macro
from grimoire.engine import (
    AcquireItem,
    Engine,
    EngineOptions,
    Guards,
    Limit,
    Quest,
    Task,
    extend_task,
    get_tasks,
    order_by_route,
    override_task,
    quest_step,
)
from grimoire.infra import EngineConfig, GrimoireError, configure_logging, setup_logger
from grimoire.outfit import Modes, Outfit, OutfitSpec
from grimoire.types import Effect, Environment, Familiar, Item, Location, Monster, Skill, Slot

__all__ = [
    "AcquireItem",
    "CombatResource",
    "CombatResources",
    "CombatStrategy",
    "Effect",
    "Engine",
    "EngineConfig",
    "EngineOptions",
    "Environment",
    "Familiar",
    "GrimoireError",
    "Guards",
    "Item",
    "Limit",
    "Location",
    "Macro",
    "Modes",
    "Monster",
    "Outfit",
    "OutfitSpec",
    "Quest",
    "Skill",
    "Slot",
    "Task",
    "configure_logging",
    "extend_task",
    "get_tasks",
    "order_by_route",
    "override_task",
    "quest_step",
    "setup_logger",
]
