"""grimoire 异常层级体系。

层级树::

    GrimoireError
    ├── ConfigurationError
    │   └── TaskPartialError
    ├── AcquisitionError
    ├── EffectCapExceededError
    ├── OutfitError
    │   ├── EquipError
    │   ├── MaximizationError
    │   └── DressVerificationError
    └── LimitExceededError

所有异常均为致命错误：引擎不捕获、不重试，直接中断整个运行。
"""

from __future__ import annotations


# ── 基类 ──


class GrimoireError(Exception):
    """所有 grimoire 异常的基类。"""


# ── 配置异常 ──


class ConfigurationError(GrimoireError):
    """任务配置错误（未知依赖、重复任务名等）。"""


class TaskPartialError(ConfigurationError):
    """组合任务时缺少必需字段。"""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing properties on task: {','.join(missing)}")


# ── 执行准备异常 ──


class AcquisitionError(GrimoireError):
    """尝试所有获取方式后物品仍然不足。"""

    def __init__(self, task_name: str, item: object, num: int) -> None:
        self.task_name = task_name
        self.item = item
        self.num = num
        super().__init__(f"Task {task_name} was unable to acquire {num} {item}")


class EffectCapExceededError(GrimoireError):
    """任务要求的歌曲类状态数量超过上限。"""

    def __init__(self, task_name: str, requested: int, cap: int) -> None:
        self.task_name = task_name
        self.requested = requested
        self.cap = cap
        super().__init__(f"Task {task_name} requests too many songs ({requested} > {cap})")


# ── 装备异常 ──


class OutfitError(GrimoireError):
    """装备求解 / 穿戴相关错误。"""


class EquipError(OutfitError):
    """装备声明中存在无法满足的部分。"""

    def __init__(self, task_name: str, detail: str = "") -> None:
        self.task_name = task_name
        self.detail = detail
        msg = f"Unable to equip all items for {task_name}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class MaximizationError(OutfitError):
    """外部优化器在强制刷新重试后仍然失败。"""

    def __init__(self, goals: list[str]) -> None:
        self.goals = goals
        super().__init__(f"Failed to maximize properly! (goals: {', '.join(goals)})")


class DressVerificationError(OutfitError):
    """穿戴提交后实际状态与计划不一致。"""

    def __init__(self, slot: object, expected: object) -> None:
        self.slot = slot
        self.expected = expected
        super().__init__(f"Failed to fully dress (expected: {slot} {expected})")


# ── 限制异常 ──


class LimitExceededError(GrimoireError):
    """任务执行后违反了其 Limit 约束。"""

    def __init__(self, task_name: str, kind: str, reason: str, threshold: object = None) -> None:
        self.task_name = task_name
        self.kind = kind
        self.threshold = threshold
        super().__init__(f"Task {task_name} {reason}")
