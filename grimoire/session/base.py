"""游戏会话接口 — 引擎与外部游戏环境之间的唯一通道。

提供纯粹的游戏状态读写能力（库存、装备、宠物、状态效果、冒险、战斗），
**不做**任何任务调度或装备求解。

所有调用均为同步阻塞：进入地点、结算一轮战斗、选择选项都会等待游戏返回。

使用方式::

    class MafiaSession(GameSession):
        ...

    session = MafiaSession()
    engine = Engine(tasks, session=session, settings=settings)
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from grimoire.types import Effect, Familiar, Item, Location, Skill, Slot


class GameSession(ABC):
    """游戏会话抽象基类。

    子类实现具体的连接方式；测试中使用内存假实现。
    """

    # ── 名称查询 ──

    @abstractmethod
    def item(self, name: str) -> Item:
        """按名称查找物品。

        Raises
        ------
        KeyError
            未知物品名。
        """
        ...

    @abstractmethod
    def familiar(self, name: str) -> Familiar:
        """按名称查找宠物。"""
        ...

    # ── 库存与所有权 ──

    @abstractmethod
    def item_amount(self, item: Item) -> int:
        """背包中（未装备）的物品数量。"""
        ...

    @abstractmethod
    def equipped_amount(self, item: Item) -> int:
        """当前已装备的物品数量。"""
        ...

    def have_item(self, item: Item, amount: int = 1) -> bool:
        """拥有的物品总数（背包 + 已装备）是否不少于 *amount*。"""
        return self.item_amount(item) + self.equipped_amount(item) >= amount

    @abstractmethod
    def have_familiar(self, familiar: Familiar) -> bool:
        """是否拥有该宠物。"""
        ...

    @abstractmethod
    def have_skill(self, skill: Skill) -> bool:
        """是否拥有该技能。"""
        ...

    @abstractmethod
    def can_equip(self, item: Item) -> bool:
        """角色当前是否满足装备该物品的条件。"""
        ...

    @abstractmethod
    def can_familiar_equip(self, familiar: Familiar, item: Item) -> bool:
        """该宠物能否使用此宠物装备。"""
        ...

    # ── 装备 ──

    @abstractmethod
    def equipped_item(self, slot: Slot) -> Item:
        """指定槽位当前装备，空槽返回 ``Item.NONE``。"""
        ...

    @abstractmethod
    def equip(self, slot: Slot, item: Item) -> None:
        """在指定槽位装备物品；``Item.NONE`` 表示卸下。"""
        ...

    @abstractmethod
    def apply_modes(self, commands: dict[str, str]) -> None:
        """为可切换模式的物品设置模式，``{命令: 模式}``。"""
        ...

    @abstractmethod
    def refresh_inventory(self) -> None:
        """强制刷新库存缓存。"""
        ...

    # ── 宠物 ──

    @abstractmethod
    def my_familiar(self) -> Familiar:
        """当前出战宠物，无宠物时返回 ``Familiar.NONE``。"""
        ...

    @abstractmethod
    def use_familiar(self, familiar: Familiar) -> None:
        """切换出战宠物。"""
        ...

    @abstractmethod
    def my_bjorned_familiar(self) -> Familiar:
        """背包骑乘槽中的宠物。"""
        ...

    @abstractmethod
    def bjornify_familiar(self, familiar: Familiar) -> None:
        """将宠物放入背包骑乘槽；``Familiar.NONE`` 表示清空。"""
        ...

    @abstractmethod
    def my_enthroned_familiar(self) -> Familiar:
        """王冠骑乘槽中的宠物。"""
        ...

    @abstractmethod
    def enthrone_familiar(self, familiar: Familiar) -> None:
        """将宠物放入王冠骑乘槽；``Familiar.NONE`` 表示清空。"""
        ...

    # ── 状态效果 ──

    @abstractmethod
    def my_effects(self) -> list[Effect]:
        """当前生效的状态，按获得顺序排列。"""
        ...

    @abstractmethod
    def ensure_effect(self, effect: Effect) -> None:
        """确保状态生效（未生效时获取）。"""
        ...

    @abstractmethod
    def uneffect(self, effect: Effect) -> None:
        """移除状态。"""
        ...

    # ── 物品获取 ──

    @abstractmethod
    def buy(self, item: Item, quantity: int, price: int) -> int:
        """以不高于 *price* 的单价购买，返回实际购买数量。"""
        ...

    @abstractmethod
    def fold_relatives(self, item: Item) -> list[Item]:
        """可折叠成 *item* 的同组物品，不可折叠时返回空列表。"""
        ...

    @abstractmethod
    def fold(self, item: Item) -> None:
        """将同组物品折叠为 *item*。"""
        ...

    @abstractmethod
    def retrieve_item(self, item: Item, quantity: int) -> bool:
        """通用获取（取出、合成、购买等），使总数达到 *quantity*。"""
        ...

    # ── 冒险与战斗 ──

    @abstractmethod
    def adv1(self, location: Location, macro: str) -> bool:
        """在地点冒险一次。"""
        ...

    @abstractmethod
    def run_combat(self, macro: str) -> str:
        """以宏结算当前战斗，返回页面文本。"""
        ...

    @abstractmethod
    def in_combat(self) -> bool:
        """当前是否有尚未结算的战斗。"""
        ...

    @abstractmethod
    def in_multi_fight(self) -> bool:
        """是否处于连续战斗中。"""
        ...

    @abstractmethod
    def choice_follows_fight(self) -> bool:
        """战斗结束后是否紧跟选项事件。"""
        ...

    @abstractmethod
    def run_choice(self, option: int) -> str:
        """选择选项，``-1`` 表示按已设置的默认选项处理。"""
        ...

    @abstractmethod
    def turns_spent(self, location: Location) -> int:
        """在地点累计花费的回合数。"""
        ...

    @abstractmethod
    def last_location(self) -> Location | None:
        """上一次冒险的地点。"""
        ...

    # ── 宏 ──

    @abstractmethod
    def save_macro(self, macro: str) -> None:
        """安装当前生效的战斗宏。"""
        ...

    @abstractmethod
    def set_autoattack(self, macro: str) -> None:
        """安装自动攻击宏，空字符串表示关闭。"""
        ...
