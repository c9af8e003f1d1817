"""穿戴提交 — 把求解好的 Outfit 写入游戏会话。

提交顺序固定，避免后一步覆盖前一步::

    1. 出战宠物
    2. 先卸下需换槽 / 被禁止 / 阻挡副手的已穿物品
    3. 非饰品槽（武器 → 副手 → 帽子 → 背部 → 衬衫 → 裤子 → 宠物装备）
    4. 饰品槽（已穿在空闲饰品槽中的目标饰品保持不动）
    5. 剩余目标交给外部优化器（失败时刷新库存重试一次）
    6. 应用装备模式
    7. 骑乘槽宠物
    8. 校验实际状态
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from grimoire.infra.exceptions import DressVerificationError, MaximizationError, OutfitError
from grimoire.session.maximizer import Maximizer, MaximizerRequest
from grimoire.types import (
    ACCESSORY_SLOTS,
    NONACCESSORY_SLOTS,
    RIDER_SLOTS,
    Familiar,
    Item,
    Slot,
)

if TYPE_CHECKING:
    from grimoire.outfit.outfit import Outfit

RIDER_CARRIERS: dict[Slot, tuple[Slot, str]] = {
    Slot.buddy_bjorn: (Slot.back, "Buddy Bjorn"),
    Slot.crown_of_thrones: (Slot.hat, "Crown of Thrones"),
}
"""骑乘槽 → (承载物品所在槽, 承载物品名)。"""


def dress_outfit(outfit: Outfit, maximizer: Maximizer | None = None) -> None:
    """提交 Outfit：先执行 ``before_dress`` 钩子，最后执行 ``after_dress`` 钩子。

    Raises
    ------
    MaximizationError
        优化器在刷新库存重试后仍然失败。
    DressVerificationError
        提交后实际状态与计划不一致。
    """
    for hook in outfit.before_dress:
        hook()
    _dress(outfit, maximizer, refreshed=False)
    for hook in outfit.after_dress:
        hook()


def _dress(outfit: Outfit, maximizer: Maximizer | None, refreshed: bool) -> None:
    session = outfit.session
    equips = outfit.equips

    # ── 1. 宠物 ──
    if outfit.familiar is not None and session.my_familiar() != outfit.familiar:
        session.use_familiar(outfit.familiar)

    used_slots: set[Slot] = set()
    for rider_slot in RIDER_SLOTS:
        if rider_slot in outfit.riders and _carrier_targeted(outfit, rider_slot):
            used_slots.update(RIDER_SLOTS)

    # ── 2. 先卸下 ──
    targets = {item for item in equips.values() if item != Item.NONE}
    for slot in NONACCESSORY_SLOTS:
        current = session.equipped_item(slot)
        if current == Item.NONE:
            continue
        moving = current in targets and equips.get(slot) != current
        if moving or current in outfit.avoid:
            logger.debug("卸下 {} ({})", current, slot)
            session.equip(slot, Item.NONE)

    wanted_offhand = equips.get(Slot.offhand)
    if wanted_offhand not in (None, Item.NONE) and Slot.weapon not in equips:
        weapon = session.equipped_item(Slot.weapon)
        if weapon != Item.NONE and weapon.hands > 1:
            logger.debug("卸下阻挡副手的双手武器 {}", weapon)
            session.equip(Slot.weapon, Item.NONE)

    # ── 3. 非饰品 ──
    for slot in NONACCESSORY_SLOTS:
        item = equips.get(slot)
        if item is None:
            continue
        if session.equipped_item(slot) != item:
            session.equip(slot, item)
        used_slots.add(slot)

    # ── 4. 饰品 ──
    accessories = [equips[slot] for slot in ACCESSORY_SLOTS if slot in equips]
    missing: list[Item] = []
    for accessory in accessories:
        worn = next(
            (
                slot
                for slot in ACCESSORY_SLOTS
                if slot not in used_slots and session.equipped_item(slot) == accessory
            ),
            None,
        )
        if worn is None:
            missing.append(accessory)
        else:
            used_slots.add(worn)
    for accessory in missing:
        free = next((slot for slot in ACCESSORY_SLOTS if slot not in used_slots), None)
        if free is None:
            raise OutfitError("No accessory slots remaining")
        session.equip(free, accessory)
        used_slots.add(free)

    # ── 5. 优化器 ──
    modes = outfit.modes.to_commands()
    if outfit.modifier:
        goals = list(outfit.modifier)
        if maximizer is None:
            logger.error("装备目标 {} 需要优化器，但未提供", goals)
            raise MaximizationError(goals)
        request = MaximizerRequest(
            goals=tuple(goals),
            used_slots=frozenset(used_slots),
            avoid=tuple(outfit.avoid),
            modes=modes,
            bonuses=dict(outfit.bonuses),
            force_refresh=refreshed,
        )
        if not maximizer.maximize(request):
            if refreshed:
                raise MaximizationError(goals)
            logger.warning("优化失败，刷新库存后重试: {}", goals)
            session.refresh_inventory()
            _dress(outfit, maximizer, refreshed=True)
            return

    # ── 6. 模式 ──
    if modes:
        session.apply_modes(modes)

    # ── 7. 骑乘 ──
    bjorn = outfit.riders.get(Slot.buddy_bjorn)
    if bjorn is not None:
        if session.my_enthroned_familiar() == bjorn:
            session.enthrone_familiar(Familiar.NONE)
        if session.my_bjorned_familiar() != bjorn:
            session.bjornify_familiar(bjorn)
    crown = outfit.riders.get(Slot.crown_of_thrones)
    if crown is not None:
        if session.my_bjorned_familiar() == crown:
            session.bjornify_familiar(Familiar.NONE)
        if session.my_enthroned_familiar() != crown:
            session.enthrone_familiar(crown)

    _verify(outfit, accessories)


def _carrier_targeted(outfit: Outfit, rider_slot: Slot) -> bool:
    """承载物品是否被固定在槽位上或带有优化权重。"""
    carrier_slot, carrier_name = RIDER_CARRIERS[rider_slot]
    item = outfit.equips.get(carrier_slot)
    if item is not None and item.name == carrier_name:
        return True
    return any(i.name == carrier_name for i in outfit.bonuses)


def _verify(outfit: Outfit, accessories: list[Item]) -> None:
    session = outfit.session
    if outfit.familiar is not None and session.my_familiar() != outfit.familiar:
        raise DressVerificationError("familiar", outfit.familiar)

    for slot in NONACCESSORY_SLOTS:
        expected = outfit.equips.get(slot)
        if expected is not None and session.equipped_item(slot) != expected:
            raise DressVerificationError(slot, expected)

    for accessory in set(accessories):
        if accessory == Item.NONE:
            continue
        if session.equipped_amount(accessory) < accessories.count(accessory):
            raise DressVerificationError("accessory", accessory)

    readers = {
        Slot.buddy_bjorn: session.my_bjorned_familiar,
        Slot.crown_of_thrones: session.my_enthroned_familiar,
    }
    for rider_slot, familiar in outfit.riders.items():
        if readers[rider_slot]() != familiar:
            raise DressVerificationError(rider_slot, familiar)
    logger.debug("穿戴提交完成: {}", outfit)
