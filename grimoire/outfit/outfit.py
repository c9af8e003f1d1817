"""装备求解器 — 把装备声明求解为内部一致的槽位分配。

``Outfit`` 是一次任务执行独占的可变工作分配。``equip`` 按可装备物的种类
（物品 / 宠物 / 列表 / 装备声明 / 另一个 Outfit）分派，成功时修改分配并返回
``True``，失败时不修改（装备声明除外，见 ``_equip_spec``）。

物品的放置策略按顺序尝试::

    已满足 → 空物品占位 → 持有 / 禁用检查 →
    直接放入所属槽 → 饰品槽 → 双持副手 → 由专用宠物携带
"""

from __future__ import annotations

import functools
import operator
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from loguru import logger

from grimoire.infra.exceptions import GrimoireError, OutfitError
from grimoire.outfit.dress import RIDER_CARRIERS, dress_outfit
from grimoire.outfit.modes import Modes, current_modes
from grimoire.outfit.spec import OutfitSpec
from grimoire.session.base import GameSession
from grimoire.session.maximizer import Maximizer
from grimoire.session.settings import SettingsStore
from grimoire.types import ACCESSORY_SLOTS, OUTFIT_SLOTS, RIDER_SLOTS, Familiar, Item, Skill, Slot

DUAL_WIELD_SKILL = Skill("Double-Fisted Skull Smashing")
"""允许在副手装备单手武器的技能。"""

WEAPON_HOLDER = Familiar("Disembodied Hand")
OFFHAND_HOLDER = Familiar("Left-Hand Man")


class Outfit:
    """可变的装备分配。

    Parameters
    ----------
    session:
        用于持有量 / 可装备性检查的游戏会话。
    """

    def __init__(self, session: GameSession) -> None:
        self.session = session
        self.equips: dict[Slot, Item] = {}
        self.familiar: Familiar | None = None
        self.riders: dict[Slot, Familiar] = {}
        self.modes: Modes = Modes()
        self.avoid: list[Item] = []
        self.modifier: list[str] = []
        self.bonuses: dict[Item, float] = {}
        self.before_dress: list[Callable[[], None]] = []
        self.after_dress: list[Callable[[], None]] = []

    # ═══════════════════════════════════════════════════════════════════════
    # 查询
    # ═══════════════════════════════════════════════════════════════════════

    def equipped_amount(self, item: Item) -> int:
        """分配中该物品的件数。"""
        return sum(1 for equipped in self.equips.values() if equipped == item)

    def have_equipped(self, item: Item, slot: Slot | None = None) -> bool:
        if slot is None:
            return self.equipped_amount(item) > 0
        return self.equips.get(slot) == item

    def _is_available(self, item: Item) -> bool:
        if item in self.avoid:
            return False
        if not self.session.have_item(item, self.equipped_amount(item) + 1):
            return False
        if item.single_equip and self.equipped_amount(item) > 0:
            return False
        return True

    def _weapon_allows_offhand(self) -> bool:
        weapon = self.equips.get(Slot.weapon)
        return weapon is None or weapon == Item.NONE or weapon.hands == 1

    # ═══════════════════════════════════════════════════════════════════════
    # 装备入口
    # ═══════════════════════════════════════════════════════════════════════

    @functools.singledispatchmethod
    def equip(self, thing: Any, slot: Slot | None = None) -> bool:
        """装备物品 / 宠物 / 列表 / 装备声明 / Outfit。

        Parameters
        ----------
        thing:
            可装备物。
        slot:
            目标槽位；列表给定槽位时按顺序取第一个成功者。

        Returns
        -------
        bool
            是否成功。
        """
        raise TypeError(f"无法装备 {type(thing).__name__}: {thing!r}")

    @equip.register(Item)
    def _(self, thing: Item, slot: Slot | None = None) -> bool:
        return self._equip_item(thing, slot)

    @equip.register(Familiar)
    def _(self, thing: Familiar, slot: Slot | None = None) -> bool:
        return self._equip_familiar(thing)

    @equip.register(list)
    @equip.register(tuple)
    def _(self, thing: Sequence[Any], slot: Slot | None = None) -> bool:
        if slot is not None:
            return self.equip_first(thing, slot)
        return all(self.equip(entry) for entry in thing)

    @equip.register(OutfitSpec)
    def _(self, thing: OutfitSpec, slot: Slot | None = None) -> bool:
        return self._equip_spec(thing)

    def _equip_outfit(self, thing: Outfit, slot: Slot | None = None) -> bool:
        return self._equip_spec(thing.spec())

    def equip_first(self, things: Sequence[Any], slot: Slot | None = None) -> bool:
        """按顺序尝试，第一个成功者生效，之后的不再尝试。"""
        return any(self.equip(thing, slot) for thing in things)

    def can_equip(self, thing: Any, slot: Slot | None = None) -> bool:
        """在副本上试装，不修改自身。"""
        return self.clone().equip(thing, slot)

    def try_equip(self, thing: Any, slot: Slot | None = None) -> bool:
        """仅当完整可行时才装备，失败时不留下部分分配。"""
        if not self.can_equip(thing, slot):
            return False
        return self.equip(thing, slot)

    # ── 物品 ──

    def _equip_item(self, item: Item, slot: Slot | None) -> bool:
        if self.have_equipped(item, slot):
            return True
        if item == Item.NONE:
            return self._equip_item_none(slot)
        if not self._is_available(item):
            return False
        return (
            self._equip_non_accessory(item, slot)
            or self._equip_accessory(item, slot)
            or self._equip_using_dual_wield(item, slot)
            or self._equip_using_familiar(item, slot)
        )

    def _equip_item_none(self, slot: Slot | None) -> bool:
        if slot is None:
            return True
        if slot in self.equips:
            return False
        self.equips[slot] = Item.NONE
        return True

    def _equip_non_accessory(self, item: Item, slot: Slot | None) -> bool:
        target = item.slot
        if target is None or target.is_accessory:
            return False
        if slot is not None and slot != target:
            return False
        if target in self.equips:
            return False
        if target == Slot.offhand and not self._weapon_allows_offhand():
            return False
        if target == Slot.familiar:
            if self.familiar is not None and not self.session.can_familiar_equip(
                self.familiar, item
            ):
                return False
        elif not self.session.can_equip(item):
            return False
        self.equips[target] = item
        return True

    def _equip_accessory(self, item: Item, slot: Slot | None) -> bool:
        if not item.is_accessory:
            return False
        if slot is not None and not slot.is_accessory:
            return False
        if not self.session.can_equip(item):
            return False
        if slot is None:
            slot = next((s for s in ACCESSORY_SLOTS if s not in self.equips), None)
            if slot is None:
                return False
        elif slot in self.equips:
            return False
        self.equips[slot] = item
        return True

    def _equip_using_dual_wield(self, item: Item, slot: Slot | None) -> bool:
        if slot not in (None, Slot.offhand):
            return False
        if item.slot != Slot.weapon or item.hands != 1:
            return False
        if Slot.offhand in self.equips or not self._weapon_allows_offhand():
            return False
        if not self.session.have_skill(DUAL_WIELD_SKILL):
            return False
        if not self.session.can_equip(item):
            return False
        self.equips[Slot.offhand] = item
        return True

    def _equip_using_familiar(self, item: Item, slot: Slot | None) -> bool:
        if slot not in (None, Slot.familiar):
            return False
        if Slot.familiar in self.equips or item.single_equip:
            return False
        holders = {Slot.weapon: WEAPON_HOLDER, Slot.offhand: OFFHAND_HOLDER}
        holder = holders.get(item.slot)
        if holder is None or not self.equip(holder):
            return False
        self.equips[Slot.familiar] = item
        return True

    # ── 宠物 ──

    def _equip_familiar(self, familiar: Familiar) -> bool:
        if familiar == self.familiar:
            return True
        if self.familiar is not None:
            return False
        if familiar != Familiar.NONE:
            if not self.session.have_familiar(familiar):
                return False
            if familiar in self.riders.values():
                return False
        pinned = self.equips.get(Slot.familiar)
        if pinned not in (None, Item.NONE) and not self.session.can_familiar_equip(
            familiar, pinned
        ):
            return False
        self.familiar = familiar
        return True

    # ── 装备声明 ──

    def _equip_spec(self, spec: OutfitSpec) -> bool:
        """合并整个装备声明。

        结果为所有子项结果的与；失败的子项不会撤销已成功的子项。
        """
        succeeded = True
        for slot, things in spec.slot_items():
            if not self.equip(things, slot):
                logger.debug("槽位 {} 无法装备 {}", slot, things)
                succeeded = False
        for item in spec.equip:
            if not self.equip(item):
                logger.debug("无法装备 {}", item)
                succeeded = False
        if spec.familiar is not None and not self.equip(spec.familiar):
            logger.debug("无法使用宠物 {}", spec.familiar)
            succeeded = False
        self.avoid.extend(spec.avoid)
        self.modifier.extend(spec.modifier)
        if not self.set_modes(spec.modes):
            succeeded = False
        for rider_slot, candidates in spec.riders.items():
            if not self.equip_rider(rider_slot, candidates):
                logger.debug("骑乘槽 {} 无可用宠物 {}", rider_slot, candidates)
                succeeded = False
        if spec.bonuses and not self.apply_bonuses(spec.bonuses, operator.add):
            succeeded = False
        self.before_dress.extend(spec.before_dress)
        self.after_dress.extend(spec.after_dress)
        return succeeded

    # ═══════════════════════════════════════════════════════════════════════
    # 骑乘 / 模式 / 权重
    # ═══════════════════════════════════════════════════════════════════════

    def equip_rider(self, rider_slot: Slot, target: Familiar | Sequence[Familiar]) -> bool:
        """从候选列表中为骑乘槽挑选宠物。

        槽中已有的宠物属于候选时直接成功；否则取第一个持有、非出战、
        且不在另一骑乘槽中的候选。
        """
        if rider_slot not in RIDER_SLOTS:
            raise ValueError(f"{rider_slot} 不是骑乘槽")
        candidates = [target] if isinstance(target, Familiar) else list(target)
        current = self.riders.get(rider_slot)
        if current is not None:
            return current in candidates
        other = next(s for s in RIDER_SLOTS if s != rider_slot)
        for familiar in candidates:
            if familiar == self.familiar or self.riders.get(other) == familiar:
                continue
            if not self.session.have_familiar(familiar):
                continue
            self.riders[rider_slot] = familiar
            return True
        return False

    def bjornify(self, target: Familiar | Sequence[Familiar]) -> bool:
        return self.equip_rider(Slot.buddy_bjorn, target)

    def enthrone(self, target: Familiar | Sequence[Familiar]) -> bool:
        return self.equip_rider(Slot.crown_of_thrones, target)

    def set_modes(self, modes: Modes | Mapping[str, Any]) -> bool:
        """合并模式；冲突的模式保留原值并返回 ``False``。"""
        if not isinstance(modes, Modes):
            modes = Modes.model_validate(modes)
        self.modes, compatible = self.modes.merge(modes)
        return compatible

    def get_bonus(self, item: Item) -> float:
        return self.bonuses.get(item, 0.0)

    def set_bonus(self, item: Item, value: float) -> bool:
        """设置优化权重；仅当该物品可装备进当前分配时生效。"""
        if not self.can_equip(item):
            return False
        self.bonuses[item] = value
        return True

    def add_bonus(self, item: Item, value: float) -> float:
        self.set_bonus(item, self.get_bonus(item) + value)
        return self.get_bonus(item)

    def apply_bonuses(
        self, bonuses: Mapping[Item, float], combine: Callable[[float, float], float]
    ) -> bool:
        """批量合并权重，``combine(现值, 新值)`` 决定合并方式。"""
        succeeded = True
        for item, value in bonuses.items():
            if not self.set_bonus(item, combine(self.get_bonus(item), value)):
                succeeded = False
        return succeeded

    # ═══════════════════════════════════════════════════════════════════════
    # 复制 / 转换
    # ═══════════════════════════════════════════════════════════════════════

    def clone(self) -> Outfit:
        result = Outfit(self.session)
        result.equips = dict(self.equips)
        result.familiar = self.familiar
        result.riders = dict(self.riders)
        result.modes = self.modes
        result.avoid = list(self.avoid)
        result.modifier = list(self.modifier)
        result.bonuses = dict(self.bonuses)
        result.before_dress = list(self.before_dress)
        result.after_dress = list(self.after_dress)
        return result

    def spec(self) -> OutfitSpec:
        """转换为等价的装备声明。"""
        slots = {OutfitSpec.SLOT_FIELDS[slot]: item for slot, item in self.equips.items()}
        return OutfitSpec(
            **slots,
            familiar=self.familiar,
            avoid=list(self.avoid),
            modifier=list(self.modifier),
            modes=self.modes,
            riders=dict(self.riders),
            bonuses=dict(self.bonuses),
            before_dress=list(self.before_dress),
            after_dress=list(self.after_dress),
        )

    @classmethod
    def from_spec(
        cls,
        spec: OutfitSpec,
        session: GameSession,
        error: GrimoireError | None = None,
    ) -> Outfit | None:
        """由装备声明构建 Outfit。

        不可满足时：给出 *error* 则抛出，否则返回 ``None``。
        """
        outfit = cls(session)
        if outfit.equip(spec):
            return outfit
        if error is not None:
            raise error
        return None

    @classmethod
    def current(cls, session: GameSession, settings: SettingsStore | None = None) -> Outfit:
        """读取会话当前的实际穿戴状态。"""
        outfit = cls(session)
        familiar = session.my_familiar()
        if not outfit.equip(familiar):
            raise OutfitError(
                f"Failed to create outfit from current state (expected: familiar {familiar})"
            )
        for slot in OUTFIT_SLOTS:
            item = session.equipped_item(slot)
            if not outfit.equip(item, slot):
                raise OutfitError(
                    f"Failed to create outfit from current state (expected: {slot} {item})"
                )
        readers = {
            Slot.buddy_bjorn: session.my_bjorned_familiar,
            Slot.crown_of_thrones: session.my_enthroned_familiar,
        }
        for rider_slot, (carrier_slot, carrier_name) in RIDER_CARRIERS.items():
            if outfit.equips.get(carrier_slot, Item.NONE).name != carrier_name:
                continue
            rider = readers[rider_slot]()
            if rider != Familiar.NONE:
                outfit.riders[rider_slot] = rider
        if settings is not None:
            outfit.modes = current_modes(settings)
        return outfit

    # ═══════════════════════════════════════════════════════════════════════
    # 提交
    # ═══════════════════════════════════════════════════════════════════════

    def dress(self, maximizer: Maximizer | None = None) -> None:
        """把分配提交到游戏会话，见 :func:`grimoire.outfit.dress.dress_outfit`。"""
        dress_outfit(self, maximizer)

    def __repr__(self) -> str:
        equips = ", ".join(f"{slot}={item}" for slot, item in self.equips.items())
        return f"Outfit({equips}; familiar={self.familiar})"


Outfit.equip.register(Outfit, Outfit._equip_outfit)
