"""任务组合 — 在已有（部分）任务定义之上扩展或覆盖字段。

部分任务可以是 :class:`Task`，也可以是字段字典（如 ``{"name": ..., "ready": ...}``），
常用于复用的通用任务片段::

    VOID_MONSTER = {"name": "Void Monster", "ready": ..., "completed": ...}
    task = extend_task(VOID_MONSTER, name="Void Monster (tower)", do=tower)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any, Union

from grimoire.engine.lazy import Lazy, delay, undelay
from grimoire.engine.limit import Limit
from grimoire.engine.task import Task
from grimoire.infra.exceptions import TaskPartialError
from grimoire.outfit.outfit import Outfit
from grimoire.outfit.spec import OutfitSpec

PartialTask = Union[Task, Mapping[str, Any]]

REQUIRED_FIELDS = ("name", "completed", "do")


def _as_partial(task: PartialTask) -> dict[str, Any]:
    """转换为只含显式字段的字典；Task 中取默认值的字段视为未设置。"""
    if not isinstance(task, Task):
        return {k: v for k, v in task.items() if v is not None}
    result: dict[str, Any] = {}
    for f in dataclasses.fields(Task):
        value = getattr(task, f.name)
        if f.default is not dataclasses.MISSING and value == f.default:
            continue
        if f.default_factory is not dataclasses.MISSING and value == f.default_factory():
            continue
        result[f.name] = value
    return result


def _validate(fields: dict[str, Any]) -> Task:
    missing = [name for name in REQUIRED_FIELDS if fields.get(name) is None]
    if missing:
        raise TaskPartialError(missing)
    return Task(**fields)


def _chain(
    first: Callable[[], Any] | None, second: Callable[[], Any] | None
) -> Callable[[], None]:
    def chained() -> None:
        if first is not None:
            first()
        if second is not None:
            second()

    return chained


def _either(first: Callable[[], bool], second: Callable[[], bool]) -> Callable[[], bool]:
    return lambda: first() or second()


def _both(first: Callable[[], bool], second: Callable[[], bool]) -> Callable[[], bool]:
    return lambda: first() and second()


def _concat(first: Any, second: Any) -> Lazy[list[Any]]:
    return Lazy(lambda: [*undelay(delay(first)), *undelay(delay(second))])


def _merge_outfits(preferred: Any, base: Any) -> Lazy[OutfitSpec]:
    return Lazy(lambda: _merge_specs(_spec_of(preferred), _spec_of(base)))


def _spec_of(outfit: Any) -> OutfitSpec:
    outfit = undelay(delay(outfit))
    if outfit is None:
        return OutfitSpec()
    if isinstance(outfit, Outfit):
        return outfit.spec()
    return outfit


def _merge_specs(preferred: OutfitSpec, base: OutfitSpec) -> OutfitSpec:
    """字段级合并，*preferred* 中已设置的字段优先。

    注意方向：调用方传入的是 *options* 的装备作为 *preferred*，即 *options* 覆盖
    基础任务，与 ``choices`` / ``limit`` 的合并方向一致；并非“基础任务字段优先”。
    """
    defaults = OutfitSpec()
    overrides = {
        f.name: getattr(preferred, f.name)
        for f in dataclasses.fields(OutfitSpec)
        if getattr(preferred, f.name) != getattr(defaults, f.name)
    }
    return dataclasses.replace(base, **overrides)


def _merge_limits(preferred: Limit | None, base: Limit | None) -> Limit | None:
    if preferred is None or base is None:
        return preferred or base
    defaults = Limit()
    overrides = {
        f.name: getattr(preferred, f.name)
        for f in dataclasses.fields(Limit)
        if getattr(preferred, f.name) != getattr(defaults, f.name)
    }
    return dataclasses.replace(base, **overrides)


def extend_task(base: PartialTask, **options: Any) -> Task:
    """在 *base* 之上组合 *options*，返回新任务。

    合并规则：

    - ``completed``：任一为真即完成
    - ``do``：两者均为函数时依次调用（*options* 先），否则 *options* 优先
    - ``ready``：两者都为真才就绪
    - ``prepare`` / ``post``：依次调用（*options* 先）
    - ``acquire`` / ``effects``：延迟拼接（*options* 在前）
    - ``choices`` / ``limit`` / ``outfit``：字段级合并，*options* 优先
    - 其余字段：*options* 优先

    Raises
    ------
    TaskPartialError
        合并后缺少 ``name`` / ``completed`` / ``do``。
    """
    old = _as_partial(base)
    new = {k: v for k, v in options.items() if v is not None}
    merged: dict[str, Any] = {**old, **new}

    if "completed" in old and "completed" in new:
        merged["completed"] = _either(new["completed"], old["completed"])

    if callable(new.get("do")) and callable(old.get("do")):
        merged["do"] = _chain(new["do"], old["do"])

    if "ready" in old and "ready" in new:
        merged["ready"] = _both(new["ready"], old["ready"])

    for hook in ("prepare", "post"):
        if hook in old and hook in new:
            merged[hook] = _chain(new[hook], old[hook])

    for listed in ("acquire", "effects"):
        if listed in old and listed in new:
            merged[listed] = _concat(new[listed], old[listed])

    if "choices" in old and "choices" in new:
        merged["choices"] = {**old["choices"], **new["choices"]}

    if "limit" in old and "limit" in new:
        merged["limit"] = _merge_limits(new["limit"], old["limit"])

    if "outfit" in old and "outfit" in new:
        merged["outfit"] = _merge_outfits(new["outfit"], old["outfit"])

    return _validate(merged)


def override_task(base: PartialTask, **options: Any) -> Task:
    """以 *options* 直接替换 *base* 的字段。"""
    return _validate({**_as_partial(base), **options})
