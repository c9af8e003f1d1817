"""任务组装与路线排序。"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence

from loguru import logger

from grimoire.engine.task import Quest, Task
from grimoire.infra.exceptions import ConfigurationError

DEFAULT_PRIORITY = 1000.0
DEPENDENCY_STEP = 0.01


def get_tasks(quests: Sequence[Quest]) -> list[Task]:
    """把任务线展开为任务列表。

    - 任务名加上 ``quest/`` 前缀；不含 ``/`` 的依赖名视为同一任务线内的任务
    - 任务线的 ``completed`` 与任务自身的取或，``ready`` 取与
    - 返回新的 Task 实例，原任务不被修改

    Raises
    ------
    ConfigurationError
        依赖了不存在的任务。
    """
    result: list[Task] = []
    for quest in quests:
        for task in quest.tasks:
            after = tuple(a if "/" in a else f"{quest.name}/{a}" for a in task.after)
            result.append(
                dataclasses.replace(
                    task,
                    name=f"{quest.name}/{task.name}",
                    after=after,
                    completed=_any_of(quest.completed, task.completed),
                    ready=_all_of(quest.ready, task.ready),
                )
            )

    names = {task.name for task in result}
    for task in result:
        for after in task.after:
            if after not in names:
                raise ConfigurationError(f"Unknown task dependency {after} of {task.name}")
    logger.debug("组装了 {} 条任务线，共 {} 个任务", len(quests), len(result))
    return result


def order_by_route(
    tasks: Sequence[Task], routing: Sequence[str], ignore_missing_tasks: bool = False
) -> list[Task]:
    """按路线重排任务。

    路线中第 i 个任务的优先级为 i，其依赖（递归）依次减 0.01，
    除非已有更小的优先级；未出现在路线中的任务优先级为 1000。
    排序稳定，同优先级保持原顺序。

    Raises
    ------
    ConfigurationError
        路线中出现未知任务且未设置 *ignore_missing_tasks*。
    """
    by_name = {task.name: task for task in tasks}
    priorities = {task.name: DEFAULT_PRIORITY for task in tasks}

    def set_priority(name: str, priority: float) -> None:
        if name not in priorities:
            if ignore_missing_tasks:
                return
            raise ConfigurationError(f"Unknown routing task {name}")
        if priorities[name] <= priority:
            return
        priorities[name] = priority
        for requirement in by_name[name].after:
            set_priority(requirement, priority - DEPENDENCY_STEP)

    for index, name in enumerate(routing):
        set_priority(name, float(index))

    return sorted(tasks, key=lambda task: priorities[task.name])


def _any_of(
    first: Callable[[], bool] | None, second: Callable[[], bool]
) -> Callable[[], bool]:
    if first is None:
        return second
    return lambda: first() or second()


def _all_of(
    first: Callable[[], bool] | None, second: Callable[[], bool] | None
) -> Callable[[], bool] | None:
    if first is None or second is None:
        return first or second
    return lambda: first() and second()
