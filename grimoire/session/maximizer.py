"""数值优化器接口。

``dress`` 在固定槽位穿戴完成后，把剩余的自由文本目标连同约束交给外部优化器，
由其填充未约束的槽位。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from grimoire.types import Item, Slot


@dataclass(frozen=True)
class MaximizerRequest:
    """一次优化调用的约束。

    Attributes
    ----------
    goals:
        优化目标表达式（按声明顺序）。
    used_slots:
        已被固定、不可由优化器改动的槽位。
    avoid:
        禁止装备的物品。
    modes:
        物品模式选择 ``{命令: 模式}``。
    bonuses:
        物品额外权重。
    force_refresh:
        是否在优化前强制刷新库存。
    """

    goals: tuple[str, ...]
    used_slots: frozenset[Slot] = frozenset()
    avoid: tuple[Item, ...] = ()
    modes: dict[str, str] = field(default_factory=dict)
    bonuses: dict[Item, float] = field(default_factory=dict)
    force_refresh: bool = False


class Maximizer(ABC):
    """外部数值优化器抽象基类。"""

    @abstractmethod
    def maximize(self, request: MaximizerRequest) -> bool:
        """按约束优化装备，成功返回 ``True``。"""
        ...
