"""执行限制 — 尝试次数 / 回合数上限与前后置条件守卫。

守卫 (Guard) 是两阶段函数：任务执行前调用，捕获「执行前」状态并返回
检查函数；任务执行后调用该检查函数断言后置条件::

    guard = Guards.changed(settings, "questL02Larva")
    check = guard()      # 执行前
    ...
    assert check()       # 执行后

所有限制仅在任务执行后 *仍未完成* 时检查，违反任一限制均为致命错误。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger

from grimoire.infra.exceptions import LimitExceededError
from grimoire.session.settings import SettingsStore

if TYPE_CHECKING:
    from grimoire.engine.task import Task

T = TypeVar("T")

Postcondition = Callable[[], bool]
Guard = Callable[[], Postcondition]


@dataclass(frozen=True)
class Limit:
    """任务执行限制。

    Attributes
    ----------
    tries:
        单次运行中的最大尝试次数。
    turns:
        在任务地点花费的最大回合数（仅对地点任务有效）。
    soft:
        同 ``tries``，但报错措辞为「可能只是运气不好」。
    unready:
        执行后 ``ready()`` 应变为 ``False``。
    completed:
        执行后 ``completed()`` 应为 ``True``。
    guard:
        前后置条件守卫，见 :class:`Guards`。
    message:
        附加在报错信息后的说明。
    """

    tries: int | None = None
    turns: int | None = None
    soft: int | None = None
    unready: bool = False
    completed: bool = False
    guard: Guard | None = None
    message: str = ""


class Guards:
    """常用守卫构造。"""

    @staticmethod
    def create(before: Callable[[], T], after: Callable[[T], bool]) -> Guard:
        """执行前计算一个值，执行后交给 *after* 判断。"""

        def guard() -> Postcondition:
            old = before()
            return lambda: after(old)

        return guard

    @staticmethod
    def after(condition: Postcondition) -> Guard:
        """执行后断言 *condition* 成立。"""
        return lambda: condition

    @staticmethod
    def changed(settings: SettingsStore, key: str) -> Guard:
        """断言设置 *key* 的值在执行前后发生了变化。"""
        return Guards.create(
            lambda: settings.get(key),
            lambda old: settings.get(key) != old,
        )


def check_limits(
    task: Task,
    attempts: int,
    turns_spent: int | None = None,
    postcondition: Postcondition | None = None,
) -> None:
    """检查未完成任务的限制。

    Parameters
    ----------
    task:
        刚执行完、仍未完成的任务。
    attempts:
        本次运行中该任务已尝试的次数（含刚完成的一次）。
    turns_spent:
        在任务地点已花费的回合数；非地点任务为 ``None``。
    postcondition:
        执行前由守卫返回的后置条件检查函数。

    Raises
    ------
    LimitExceededError
        违反任一限制。
    """
    limit = task.limit
    if limit is None:
        return
    suffix = f" {limit.message}" if limit.message else ""

    def fail(kind: str, reason: str, threshold: Any = None) -> None:
        error = LimitExceededError(task.name, kind, reason + suffix, threshold)
        logger.error("{}", error)
        raise error

    if limit.tries and attempts >= limit.tries:
        fail(
            "tries",
            f"did not complete within {limit.tries} attempts. Please check what went wrong.",
            limit.tries,
        )
    if limit.soft and attempts >= limit.soft:
        fail(
            "soft",
            f"did not complete within {limit.soft} attempts. "
            "Please check what went wrong (you may just be unlucky).",
            limit.soft,
        )
    if limit.turns and turns_spent is not None and turns_spent >= limit.turns:
        fail(
            "turns",
            f"did not complete within {limit.turns} turns. Please check what went wrong.",
            limit.turns,
        )
    # 没有 ready 谓词时跳过
    if limit.unready and task.ready is not None and task.ready():
        fail("unready", "is still ready, but should not be. Please check what went wrong.")
    if limit.completed:
        fail("completed", "is not completed, but should be. Please check what went wrong.")
    if postcondition is not None and not postcondition():
        fail("guard", "failed its guard. Please check what went wrong.")
