"""测试公共 fixtures。

``FakeSession`` 是 :class:`GameSession` 的内存实现：背包 / 装备 / 宠物 / 状态
都保存在字典里，所有写操作记录到 ``calls`` 以便断言调用顺序。
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from grimoire.session import GameSession, Maximizer, MaximizerRequest, MemorySettings
from grimoire.types import Effect, Familiar, Item, Location, Skill, Slot


class FakeSession(GameSession):
    """内存游戏会话。"""

    def __init__(self) -> None:
        self.inventory: dict[Item, int] = {}
        self.equipment: dict[Slot, Item] = {}
        self.familiars: set[Familiar] = set()
        self.skills: set[Skill] = set()
        self.unequippable: set[Item] = set()
        self.familiar_cannot_hold: dict[Familiar, set[Item]] = {}
        self.current_familiar: Familiar = Familiar.NONE
        self.bjorned: Familiar = Familiar.NONE
        self.enthroned: Familiar = Familiar.NONE
        self.effects: list[Effect] = []
        self.registry: dict[str, Item | Familiar] = {}
        self.shop: dict[Item, int] = {}
        self.stash: dict[Item, int] = {}
        self.folds: dict[Item, list[Item]] = {}
        self.turns: dict[Location, int] = {}
        self.last_loc: Location | None = None
        self.on_adventure: Callable[[Location], None] | None = None
        self.pending_fights = 0
        self.choice_pending = False
        self.calls: list[tuple] = []

    # ── 测试辅助 ──

    def give(self, item: Item, amount: int = 1) -> None:
        self.inventory[item] = self.inventory.get(item, 0) + amount
        self.registry[item.name] = item

    def wear(self, slot: Slot, item: Item) -> None:
        """直接设置已穿戴状态（不经过背包）。"""
        self.equipment[slot] = item
        self.registry[item.name] = item

    def adopt(self, *familiars: Familiar) -> None:
        for familiar in familiars:
            self.familiars.add(familiar)
            self.registry[familiar.name] = familiar

    def calls_named(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    # ── 名称查询 ──

    def item(self, name: str) -> Item:
        found = self.registry.get(name)
        if isinstance(found, Item):
            return found
        if name == "none":
            return Item.NONE
        raise KeyError(name)

    def familiar(self, name: str) -> Familiar:
        found = self.registry.get(name)
        if isinstance(found, Familiar):
            return found
        raise KeyError(name)

    # ── 库存与所有权 ──

    def item_amount(self, item: Item) -> int:
        return self.inventory.get(item, 0)

    def equipped_amount(self, item: Item) -> int:
        return sum(1 for equipped in self.equipment.values() if equipped == item)

    def have_familiar(self, familiar: Familiar) -> bool:
        return familiar in self.familiars

    def have_skill(self, skill: Skill) -> bool:
        return skill in self.skills

    def can_equip(self, item: Item) -> bool:
        return item.slot is not None and item not in self.unequippable

    def can_familiar_equip(self, familiar: Familiar, item: Item) -> bool:
        return item not in self.familiar_cannot_hold.get(familiar, set())

    # ── 装备 ──

    def equipped_item(self, slot: Slot) -> Item:
        return self.equipment.get(slot, Item.NONE)

    def equip(self, slot: Slot, item: Item) -> None:
        self.calls.append(("equip", slot, item))
        current = self.equipment.pop(slot, None)
        if current is not None and current != Item.NONE:
            self.inventory[current] = self.inventory.get(current, 0) + 1
        if item == Item.NONE:
            return
        self.inventory[item] = self.inventory.get(item, 0) - 1
        self.equipment[slot] = item

    def apply_modes(self, commands: dict[str, str]) -> None:
        self.calls.append(("apply_modes", dict(commands)))

    def refresh_inventory(self) -> None:
        self.calls.append(("refresh_inventory",))

    # ── 宠物 ──

    def my_familiar(self) -> Familiar:
        return self.current_familiar

    def use_familiar(self, familiar: Familiar) -> None:
        self.calls.append(("use_familiar", familiar))
        self.current_familiar = familiar

    def my_bjorned_familiar(self) -> Familiar:
        return self.bjorned

    def bjornify_familiar(self, familiar: Familiar) -> None:
        self.calls.append(("bjornify_familiar", familiar))
        self.bjorned = familiar

    def my_enthroned_familiar(self) -> Familiar:
        return self.enthroned

    def enthrone_familiar(self, familiar: Familiar) -> None:
        self.calls.append(("enthrone_familiar", familiar))
        self.enthroned = familiar

    # ── 状态 ──

    def my_effects(self) -> list[Effect]:
        return list(self.effects)

    def ensure_effect(self, effect: Effect) -> None:
        self.calls.append(("ensure_effect", effect))
        if effect not in self.effects:
            self.effects.append(effect)

    def uneffect(self, effect: Effect) -> None:
        self.calls.append(("uneffect", effect))
        self.effects.remove(effect)

    # ── 获取 ──

    def buy(self, item: Item, quantity: int, price: int) -> int:
        self.calls.append(("buy", item, quantity, price))
        if item in self.shop and self.shop[item] <= price:
            self.give(item, quantity)
            return quantity
        return 0

    def fold_relatives(self, item: Item) -> list[Item]:
        return list(self.folds.get(item, []))

    def fold(self, item: Item) -> None:
        self.calls.append(("fold", item))
        for relative in self.folds.get(item, []):
            if self.inventory.get(relative, 0) > 0:
                self.inventory[relative] -= 1
                self.give(item)
                return

    def retrieve_item(self, item: Item, quantity: int) -> bool:
        self.calls.append(("retrieve_item", item, quantity))
        available = self.stash.get(item, 0)
        missing = quantity - self.item_amount(item) - self.equipped_amount(item)
        moved = max(0, min(available, missing))
        if moved:
            self.stash[item] = available - moved
            self.give(item, moved)
        return self.item_amount(item) + self.equipped_amount(item) >= quantity

    # ── 冒险 ──

    def adv1(self, location: Location, macro: str) -> bool:
        self.calls.append(("adv1", location, macro))
        self.last_loc = location
        self.turns[location] = self.turns.get(location, 0) + 1
        if self.on_adventure is not None:
            self.on_adventure(location)
        return True

    def run_combat(self, macro: str) -> str:
        self.calls.append(("run_combat", macro))
        self.pending_fights -= 1
        return ""

    def in_combat(self) -> bool:
        return self.pending_fights > 0

    def in_multi_fight(self) -> bool:
        return self.pending_fights > 0

    def choice_follows_fight(self) -> bool:
        return self.choice_pending

    def run_choice(self, option: int) -> str:
        self.calls.append(("run_choice", option))
        self.choice_pending = False
        return ""

    def turns_spent(self, location: Location) -> int:
        return self.turns.get(location, 0)

    def last_location(self) -> Location | None:
        return self.last_loc

    # ── 宏 ──

    def save_macro(self, macro: str) -> None:
        self.calls.append(("save_macro", macro))

    def set_autoattack(self, macro: str) -> None:
        self.calls.append(("set_autoattack", macro))


class FakeMaximizer(Maximizer):
    """按 ``results`` 顺序返回结果的优化器，耗尽后总是成功。"""

    def __init__(self) -> None:
        self.results: list[bool] = []
        self.requests: list[MaximizerRequest] = []

    def maximize(self, request: MaximizerRequest) -> bool:
        self.requests.append(request)
        return self.results.pop(0) if self.results else True


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def settings() -> MemorySettings:
    return MemorySettings()


@pytest.fixture
def maximizer() -> FakeMaximizer:
    return FakeMaximizer()


@pytest.fixture
def tmp_yaml(tmp_path: Path):
    """创建临时 YAML 文件的工厂 fixture。"""

    def _factory(name: str, content: str) -> Path:
        p = tmp_path / name
        p.write_text(content, encoding="utf-8")
        return p

    return _factory
