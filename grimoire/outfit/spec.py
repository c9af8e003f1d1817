"""装备声明 — Outfit 的可序列化 / 声明式形式。

每个槽位可以给出单件物品或物品列表（列表按顺序取第一个能装备的），
``equip`` 中的自由物品则必须全部装备成功。

YAML 示例::

    weapon: [Fourth of May Cosplay Saber, seal-clubbing club]
    acc1: Kremlin's Greatest Briefcase
    equip: [Lil' Doctor bag]
    familiar: Grey Goose
    modifier: [item, -combat]
    modes:
      umbrella: bucket style
    riders:
      buddy-bjorn: [Gelatinous Cubeling, Grimstone Golem]
    bonuses:
      June cleaver: 100
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar

from loguru import logger

from grimoire.outfit.modes import Modes
from grimoire.types import OUTFIT_SLOTS, RIDER_SLOTS, Familiar, Item, Slot

ItemChoice = Item | list[Item]
FamiliarChoice = Familiar | list[Familiar]


@dataclass
class OutfitSpec:
    """装备声明。

    Attributes
    ----------
    hat, back, weapon, offhand, shirt, pants, acc1, acc2, acc3, famequip:
        各槽位的物品或候选列表（首个可装备者生效）。
    equip:
        不指定槽位的物品，全部需要装备成功。
    familiar:
        出战宠物。
    avoid:
        禁止装备的物品（同时传给优化器）。
    modifier:
        交给外部优化器的目标表达式。
    modes:
        可切换装备的模式选择。
    riders:
        骑乘槽 → 宠物或候选列表。
    bonuses:
        物品 → 优化器偏好权重。
    before_dress, after_dress:
        穿戴提交前后执行的钩子。
    """

    hat: ItemChoice | None = None
    back: ItemChoice | None = None
    weapon: ItemChoice | None = None
    offhand: ItemChoice | None = None
    shirt: ItemChoice | None = None
    pants: ItemChoice | None = None
    acc1: ItemChoice | None = None
    acc2: ItemChoice | None = None
    acc3: ItemChoice | None = None
    famequip: ItemChoice | None = None
    equip: list[Item] = field(default_factory=list)
    familiar: Familiar | None = None
    avoid: list[Item] = field(default_factory=list)
    modifier: str | list[str] = field(default_factory=list)
    modes: Modes = field(default_factory=Modes)
    riders: dict[Slot, FamiliarChoice] = field(default_factory=dict)
    bonuses: dict[Item, float] = field(default_factory=dict)
    before_dress: list[Callable[[], None]] = field(default_factory=list)
    after_dress: list[Callable[[], None]] = field(default_factory=list)

    SLOT_FIELDS: ClassVar[dict[Slot, str]] = {
        Slot.hat: "hat",
        Slot.back: "back",
        Slot.weapon: "weapon",
        Slot.offhand: "offhand",
        Slot.shirt: "shirt",
        Slot.pants: "pants",
        Slot.acc1: "acc1",
        Slot.acc2: "acc2",
        Slot.acc3: "acc3",
        Slot.familiar: "famequip",
    }

    def __post_init__(self) -> None:
        if isinstance(self.modifier, str):
            self.modifier = [self.modifier]
        if isinstance(self.modes, dict):
            self.modes = Modes.model_validate(self.modes)
        for rider_slot in self.riders:
            if rider_slot not in RIDER_SLOTS:
                raise ValueError(f"{rider_slot} 不是骑乘槽")

    def slot_items(self) -> Iterator[tuple[Slot, ItemChoice]]:
        """按 ``OUTFIT_SLOTS`` 顺序遍历已声明的槽位。"""
        for slot in OUTFIT_SLOTS:
            value = getattr(self, self.SLOT_FIELDS[slot])
            if value is not None:
                yield slot, value

    # ── 序列化 ──

    def to_dict(self) -> dict[str, Any]:
        """渲染为仅含名称的字典（用于日志与 YAML）；钩子不参与序列化。"""
        data: dict[str, Any] = {}
        for slot, value in self.slot_items():
            data[self.SLOT_FIELDS[slot]] = _names(value)
        if self.equip:
            data["equip"] = [i.name for i in self.equip]
        if self.familiar is not None:
            data["familiar"] = self.familiar.name
        if self.avoid:
            data["avoid"] = [i.name for i in self.avoid]
        if self.modifier:
            data["modifier"] = list(self.modifier)
        modes = self.modes.model_dump(exclude_none=True)
        if modes:
            if "retrocape" in modes:
                modes["retrocape"] = list(modes["retrocape"])
            data["modes"] = modes
        if self.riders:
            data["riders"] = {str(slot): _names(fam) for slot, fam in self.riders.items()}
        if self.bonuses:
            data["bonuses"] = {item.name: value for item, value in self.bonuses.items()}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], session: Any) -> OutfitSpec:
        """从名称字典构建，名称通过 ``session.item`` / ``session.familiar`` 解析。

        Parameters
        ----------
        data:
            ``to_dict`` 格式的字典（通常来自 YAML）。
        session:
            提供名称查找的 :class:`~grimoire.session.GameSession`。
        """
        kwargs: dict[str, Any] = {}
        for field_name in cls.SLOT_FIELDS.values():
            if data.get(field_name) is not None:
                kwargs[field_name] = _lookup(data[field_name], session.item)
        kwargs["equip"] = [session.item(n) for n in data.get("equip", [])]
        if data.get("familiar"):
            kwargs["familiar"] = session.familiar(data["familiar"])
        kwargs["avoid"] = [session.item(n) for n in data.get("avoid", [])]
        kwargs["modifier"] = data.get("modifier", [])
        kwargs["modes"] = Modes.model_validate(data.get("modes", {}))
        kwargs["riders"] = {
            Slot(slot): _lookup(names, session.familiar)
            for slot, names in data.get("riders", {}).items()
        }
        kwargs["bonuses"] = {
            session.item(name): float(value) for name, value in data.get("bonuses", {}).items()
        }
        spec = cls(**kwargs)
        logger.debug("从字典构建装备声明: {}", spec.to_dict())
        return spec


def _names(value: Item | Familiar | list) -> str | list[str]:
    if isinstance(value, list):
        return [v.name for v in value]
    return value.name


def _lookup(value: str | list[str], resolve: Callable[[str], Any]) -> Any:
    if isinstance(value, list):
        return [resolve(v) for v in value]
    return resolve(value)
