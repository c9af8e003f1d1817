"""全局枚举与游戏实体类型定义。

装备槽、环境等枚举，以及物品 / 宠物 / 技能 / 状态 / 怪物 / 地点等值类型
集中于此，供各层引用。游戏数据表本身不在本库范围内，由调用方构造实体。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


# ── 枚举基类 ──


class BaseEnum(Enum):
    """提供更友好的报错信息。"""

    @classmethod
    def _missing_(cls, value: object) -> None:
        supported = ", ".join(str(m.value) for m in cls)
        raise ValueError(f'"{value}" 不是合法的 {cls.__name__} 取值。 支持: [{supported}]')


class StrEnum(str, BaseEnum):
    """字符串枚举基类。"""

    def __str__(self) -> str:
        return str(self.value)


# ── 装备槽 ──


class Slot(StrEnum):
    """装备槽位。

    ``familiar`` 为宠物装备槽；``buddy_bjorn`` / ``crown_of_thrones``
    为两个骑乘槽（放置宠物而非物品）。
    """

    hat = "hat"
    back = "back"
    weapon = "weapon"
    offhand = "off-hand"
    shirt = "shirt"
    pants = "pants"
    acc1 = "acc1"
    acc2 = "acc2"
    acc3 = "acc3"
    familiar = "familiar"
    buddy_bjorn = "buddy-bjorn"
    crown_of_thrones = "crown-of-thrones"

    @property
    def is_accessory(self) -> bool:
        return self in ACCESSORY_SLOTS


ACCESSORY_SLOTS: tuple[Slot, ...] = (Slot.acc1, Slot.acc2, Slot.acc3)
"""三个可互换的饰品槽。"""

NONACCESSORY_SLOTS: tuple[Slot, ...] = (
    Slot.weapon,
    Slot.offhand,
    Slot.hat,
    Slot.back,
    Slot.shirt,
    Slot.pants,
    Slot.familiar,
)
"""非饰品槽，顺序即穿戴提交顺序（武器先于副手）。"""

OUTFIT_SLOTS: tuple[Slot, ...] = (
    Slot.hat,
    Slot.back,
    Slot.weapon,
    Slot.offhand,
    Slot.shirt,
    Slot.pants,
    Slot.acc1,
    Slot.acc2,
    Slot.acc3,
    Slot.familiar,
)
"""OutfitSpec 中可按槽位声明的全部槽。"""

RIDER_SLOTS: tuple[Slot, ...] = (Slot.buddy_bjorn, Slot.crown_of_thrones)
"""骑乘槽。"""


class Environment(StrEnum):
    """地点环境类型。"""

    indoor = "indoor"
    outdoor = "outdoor"
    underground = "underground"
    none = "none"


# ── 游戏实体 ──


@dataclass(frozen=True, slots=True)
class Item:
    """物品。

    Attributes
    ----------
    name:
        物品名。
    slot:
        可装备的槽位；饰品统一记为 ``Slot.acc1``，不可装备物品为 ``None``。
    hands:
        武器所需手数（非武器为 0）。
    single_equip:
        是否同时只能装备一件。
    """

    name: str
    slot: Slot | None = None
    hands: int = 0
    single_equip: bool = False

    NONE: ClassVar[Item]

    @property
    def is_accessory(self) -> bool:
        return self.slot is not None and self.slot.is_accessory

    def __str__(self) -> str:
        return self.name


Item.NONE = Item("none")


@dataclass(frozen=True, slots=True)
class Familiar:
    """宠物（同伴）。"""

    name: str

    NONE: ClassVar[Familiar]

    def __str__(self) -> str:
        return self.name


Familiar.NONE = Familiar("none")


@dataclass(frozen=True, slots=True)
class Skill:
    """技能。"""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Effect:
    """状态效果。``song`` 表示属于互斥的歌曲类状态。"""

    name: str
    song: bool = False

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Monster:
    """怪物。``id`` 用于宏中的 ``monsterid`` 判定。"""

    name: str
    id: int

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Location:
    """冒险地点。"""

    name: str
    environment: Environment = Environment.none

    def __str__(self) -> str:
        return self.name
