"""作战策略 — 每个任务的战斗计划及其到单一宏的编译。

``CombatStrategy`` 记录三部分内容：

- 起始宏（总是最先执行）
- 按怪物区分的宏 / 符号动作列表
- 无怪物特定条目时使用的默认宏 / 符号动作列表

符号动作（如 ``"kill"``、``"banish"``）只是一个字符串标签，
在编译时才通过 ``CombatResources`` 或调用方提供的默认生成器解析为具体宏。

编译结果 = 起始宏 + 压缩后的怪物分支 + 默认部分。怪物分支按 *渲染后的宏文本*
分组，文本相同的怪物共用一个 ``if`` 分支，避免超出游戏的宏指令数上限::

    [if x; A; if y; B; if z; A] → [if x || z; A; if y; B]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from loguru import logger

from grimoire.combat.macro import Macro
from grimoire.types import Item, Location, Monster, Skill

DelayedMacro = Macro | Callable[[Monster | None], Macro]
"""宏，或以当前怪物（默认部分为 ``None``）为参数生成宏的函数。"""

StrategyEntry = DelayedMacro | str
"""策略条目：宏或符号动作。"""

ActionDefaults = Mapping[str, Callable[[Monster | None, Location | None], Macro]]
"""符号动作的默认生成器: ``(monster, location) → Macro``。"""


# ═══════════════════════════════════════════════════════════════════════════════
# 战斗资源
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class CombatResource:
    """为某个符号动作分配的具体资源。

    Attributes
    ----------
    do:
        要使用的物品、技能或字面宏。
    prepare:
        执行任务前运行的准备函数（如装备相关物品）。
    """

    do: Item | Skill | Macro
    prepare: Callable[[], None] | None = None

    def to_macro(self) -> Macro:
        if isinstance(self.do, Item):
            return Macro().item(self.do)
        if isinstance(self.do, Skill):
            return Macro().skill(self.do)
        return self.do.copy()


class CombatResources:
    """符号动作 → 战斗资源 的映射，由引擎的 ``customize`` 钩子逐任务填充。"""

    def __init__(self) -> None:
        self._resources: dict[str, CombatResource] = {}

    def provide(self, action: str, resource: CombatResource | None) -> None:
        """为动作分配资源；``None`` 被忽略。"""
        if resource is None:
            return
        self._resources[action] = resource

    def has(self, action: str) -> bool:
        return action in self._resources

    def get(self, action: str) -> CombatResource | None:
        return self._resources.get(action)

    def get_macro(self, action: str) -> Macro | None:
        resource = self._resources.get(action)
        return resource.to_macro() if resource is not None else None

    def all(self) -> list[CombatResource]:
        return list(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)


# ═══════════════════════════════════════════════════════════════════════════════
# 分支压缩
# ═══════════════════════════════════════════════════════════════════════════════


class CompressedMacro:
    """将宏体文本相同的怪物分支合并为一个 ``if`` 分支。

    分组键是宏的渲染文本，不做任何语义等价判断；空宏体被丢弃。
    分支顺序为宏体文本首次出现的顺序。
    """

    def __init__(self) -> None:
        self._components: dict[str, tuple[Macro, list[Monster]]] = {}

    def add(self, monster: Monster, macro: Macro) -> None:
        text = str(macro)
        if not text:
            return
        if text in self._components:
            self._components[text][1].append(monster)
        else:
            self._components[text] = (macro, [monster])

    def build(self) -> Macro:
        result = Macro()
        for macro, monsters in self._components.values():
            condition = " || ".join(Macro.monster_condition(m) for m in monsters)
            result.if_(condition, macro)
        return result

    def __len__(self) -> int:
        return len(self._components)


# ═══════════════════════════════════════════════════════════════════════════════
# 作战策略
# ═══════════════════════════════════════════════════════════════════════════════


class CombatStrategy:
    """单个任务的战斗计划（链式构造）。

    使用方式::

        strategy = (
            CombatStrategy()
            .macro(Macro().skill(curse), goblin)
            .action("banish", bat)
            .action("kill")
        )
        macro = strategy.compile(resources, defaults, location)
    """

    def __init__(self) -> None:
        self._starting: list[DelayedMacro] = []
        self._default: list[StrategyEntry] = []
        self._monsters: dict[Monster, list[StrategyEntry]] = {}
        self._autoattack_default: list[StrategyEntry] = []
        self._autoattack_monsters: dict[Monster, list[StrategyEntry]] = {}

    # ── 构造 ──

    def macro(self, strategy: DelayedMacro, *monsters: Monster) -> CombatStrategy:
        """追加宏；未指定怪物时追加到默认部分。"""
        self._append(self._default, self._monsters, strategy, monsters)
        return self

    def action(self, action: str, *monsters: Monster) -> CombatStrategy:
        """追加符号动作；未指定怪物时追加到默认部分。"""
        self._append(self._default, self._monsters, action, monsters)
        return self

    def prepend_macro(self, strategy: DelayedMacro, *monsters: Monster) -> CombatStrategy:
        """在已有条目之前插入宏；未指定怪物时插入默认部分最前。"""
        if not monsters:
            self._default.insert(0, strategy)
        for monster in monsters:
            self._monsters.setdefault(monster, []).insert(0, strategy)
        return self

    def starting_macro(self, strategy: DelayedMacro) -> CombatStrategy:
        """追加起始宏（对所有怪物最先执行）。"""
        self._starting.append(strategy)
        return self

    def autoattack(self, strategy: DelayedMacro | str, *monsters: Monster) -> CombatStrategy:
        """追加自动攻击条目（在战斗第一回合前由游戏自动执行）。"""
        self._append(self._autoattack_default, self._autoattack_monsters, strategy, monsters)
        return self

    @staticmethod
    def _append(
        default: list[StrategyEntry],
        by_monster: dict[Monster, list[StrategyEntry]],
        entry: StrategyEntry,
        monsters: tuple[Monster, ...],
    ) -> None:
        if not monsters:
            default.append(entry)
        for monster in monsters:
            by_monster.setdefault(monster, []).append(entry)

    # ── 查询 ──

    def can(self, action: str) -> bool:
        """策略中是否用到了该符号动作。"""
        if action in self._default or action in self._autoattack_default:
            return True
        return any(action in entries for entries in self._monsters.values()) or any(
            action in entries for entries in self._autoattack_monsters.values()
        )

    def where(self, action: str) -> list[Monster]:
        """对哪些怪物显式使用了该符号动作。"""
        return [m for m, entries in self._monsters.items() if action in entries]

    def current_strategy(self, monster: Monster | None = None) -> list[StrategyEntry]:
        """指定怪物生效的条目列表，无特定条目时为默认部分。"""
        if monster is not None and monster in self._monsters:
            return list(self._monsters[monster])
        return list(self._default)

    @property
    def monsters(self) -> list[Monster]:
        return list(self._monsters)

    # ── 复制 ──

    def clone(self) -> CombatStrategy:
        """结构性深拷贝：修改副本的列表不会影响原策略。"""
        result = CombatStrategy()
        result._starting = list(self._starting)
        result._default = list(self._default)
        result._monsters = {m: list(entries) for m, entries in self._monsters.items()}
        result._autoattack_default = list(self._autoattack_default)
        result._autoattack_monsters = {
            m: list(entries) for m, entries in self._autoattack_monsters.items()
        }
        return result

    # ── 编译 ──

    def compile(
        self,
        resources: CombatResources | None = None,
        defaults: ActionDefaults | None = None,
        location: Location | None = None,
    ) -> Macro:
        """编译为单一战斗宏：起始宏 + 压缩怪物分支 + 默认部分。"""
        resources = resources or CombatResources()
        result = Macro()
        for entry in self._starting:
            result.step(_undelay_macro(entry, None))
        result.step(
            self._compile_body(self._default, self._monsters, resources, defaults, location)
        )
        logger.debug("战斗宏编译完成: {}", result)
        return result

    def compile_autoattack(
        self,
        resources: CombatResources | None = None,
        defaults: ActionDefaults | None = None,
        location: Location | None = None,
    ) -> Macro:
        """编译自动攻击宏（无起始宏部分）。"""
        resources = resources or CombatResources()
        return self._compile_body(
            self._autoattack_default, self._autoattack_monsters, resources, defaults, location
        )

    def _compile_body(
        self,
        default: list[StrategyEntry],
        by_monster: dict[Monster, list[StrategyEntry]],
        resources: CombatResources,
        defaults: ActionDefaults | None,
        location: Location | None,
    ) -> Macro:
        result = Macro()
        compressed = CompressedMacro()
        for monster, entries in by_monster.items():
            compressed.add(
                monster, self._resolve_all(entries, monster, resources, defaults, location)
            )
        result.step(compressed.build())
        result.step(self._resolve_all(default, None, resources, defaults, location))
        return result

    @staticmethod
    def _resolve_all(
        entries: Iterable[StrategyEntry],
        monster: Monster | None,
        resources: CombatResources,
        defaults: ActionDefaults | None,
        location: Location | None,
    ) -> Macro:
        body = Macro()
        for entry in entries:
            if isinstance(entry, str):
                body.step(_resolve_action(entry, monster, resources, defaults, location))
            else:
                body.step(_undelay_macro(entry, monster))
        return body


def _undelay_macro(entry: DelayedMacro, monster: Monster | None) -> Macro:
    if isinstance(entry, Macro):
        return entry
    return entry(monster)


def _resolve_action(
    action: str,
    monster: Monster | None,
    resources: CombatResources,
    defaults: ActionDefaults | None,
    location: Location | None,
) -> Macro | None:
    """符号动作解析：资源优先，其次默认生成器，都没有则不产生任何命令。"""
    macro = resources.get_macro(action)
    if macro is not None:
        return macro
    if defaults is not None and action in defaults:
        return defaults[action](monster, location)
    logger.debug("符号动作 {} 无可用资源或默认实现 (怪物={})", action, monster)
    return None
