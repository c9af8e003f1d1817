"""任务引擎 — 调度主循环与单任务执行流水线。

``Engine`` 持有任务列表、按任务名的尝试计数、已安装宏的缓存与临时设置覆盖，
驱动以下流程::

    选择任务 → 获取物品 → 获取状态 → 求解装备 → 定制 → 穿戴
      → 编译宏 → 设置选项 → 准备 → 执行（游荡事件时重做） → 收尾
      → 计数 → 检查限制

设计要点:
  1. **非事务**: 流水线中途失败时，之前步骤的副作用保留
  2. **致命错误**: 所有错误直接中断运行，引擎只在穿戴阶段重试一次优化器
  3. **可扩展**: ``customize`` / ``acquire_items`` / ``do`` 等步骤均为可覆盖的方法
  4. **生命周期**: ``destruct()``（或 ``with`` 退出）恢复设置并清空计数与缓存

使用方式::

    with Engine(tasks, session=session, settings=settings, maximizer=maximizer) as engine:
        engine.run()
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from grimoire.combat.strategy import ActionDefaults, CombatResources, CombatStrategy
from grimoire.engine.lazy import undelay
from grimoire.engine.limit import Postcondition, check_limits
from grimoire.engine.task import Task
from grimoire.engine.wanderers import (
    DEFAULT_WANDERERS,
    WanderingNCTable,
    last_encounter_was_wandering_nc,
)
from grimoire.infra.config import EngineConfig
from grimoire.infra.exceptions import (
    AcquisitionError,
    ConfigurationError,
    EffectCapExceededError,
    EquipError,
    GrimoireError,
)
from grimoire.outfit.outfit import Outfit
from grimoire.outfit.spec import OutfitSpec
from grimoire.session.base import GameSession
from grimoire.session.maximizer import Maximizer
from grimoire.session.settings import PropertiesManager, SettingsStore
from grimoire.types import Location, Skill

SONG_CAP_SKILL = Skill("Mariachi Memory")
"""拥有时歌曲类状态上限为 4，否则为 3。"""

DEFAULT_SETTINGS: dict[str, Any] = {
    "logPreferenceChange": True,
    "battleAction": "custom combat script",
    "autoSatisfyWithMall": True,
    "autoSatisfyWithNPCs": True,
    "autoSatisfyWithCoinmasters": True,
    "autoSatisfyWithStash": False,
    "dontStopForCounters": True,
    "maximizerFoldables": True,
    "hpAutoRecovery": "-0.05",
    "hpAutoRecoveryTarget": "0.0",
    "mpAutoRecovery": "-0.05",
    "mpAutoRecoveryTarget": "0.0",
    "afterAdventureScript": "",
    "betweenBattleScript": "",
    "choiceAdventureScript": "",
    "familiarScript": "",
    "currentMood": "apathetic",
    "autoTuxedo": True,
    "autoPinkyRing": True,
    "autoGarish": True,
    "allowNonMoodBurning": False,
    "allowSummonBurning": True,
    "libramSkillsSoftcore": "none",
}
"""引擎启动时应用的设置覆盖表，析构时恢复。"""

LOGGED_PREFERENCES = (
    "libram_savedMacro",
    "maximizerMRUList",
    "testudinalTeachings",
    "_lastCombatStarted",
)
"""追加到 ``logPreferenceChangeFilter`` 的高频设置，避免刷屏。"""


@dataclass
class EngineOptions:
    """引擎选项。

    Attributes
    ----------
    combat_defaults:
        符号动作的默认宏生成器（无资源分配时使用）。
    """

    combat_defaults: ActionDefaults | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# 任务引擎
# ═══════════════════════════════════════════════════════════════════════════════


class Engine:
    """声明式任务引擎。

    Parameters
    ----------
    tasks:
        任务列表（声明顺序即默认优先级）。
    options:
        引擎选项。
    session:
        游戏会话。
    settings:
        持久化设置存储。
    maximizer:
        外部装备优化器；任务声明了 ``modifier`` 时必须提供。
    config:
        引擎配置，默认 ``EngineConfig()``。
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        options: EngineOptions | None = None,
        *,
        session: GameSession,
        settings: SettingsStore,
        maximizer: Maximizer | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.tasks: list[Task] = list(tasks)
        self.options = options or EngineOptions()
        self.session = session
        self.settings = settings
        self.maximizer = maximizer
        self.config = config or EngineConfig()
        self.wanderers: WanderingNCTable = DEFAULT_WANDERERS.copy()

        self.tasks_by_name: dict[str, Task] = {}
        for task in self.tasks:
            if task.name in self.tasks_by_name:
                raise ConfigurationError(f"Duplicate task name {task.name}")
            self.tasks_by_name[task.name] = task

        self.attempts: dict[str, int] = {}
        self.properties = PropertiesManager(settings)
        self._cached_macro: str | None = None
        self._cached_autoattack: str | None = None
        self.init_properties(self.properties)

    # ── 生命周期 ──

    def init_properties(self, manager: PropertiesManager) -> None:
        """应用启动设置表（配置中的 ``settings`` 覆盖内置表）。"""
        existing = str(self.settings.get("logPreferenceChangeFilter", ""))
        log_filter = sorted({p for p in existing.split(",") if p} | set(LOGGED_PREFERENCES))
        properties: dict[str, Any] = {
            **DEFAULT_SETTINGS,
            "logPreferenceChangeFilter": ",".join(log_filter),
        }
        if self.config.combat_script is not None:
            properties["customCombatScript"] = self.config.combat_script
        properties.update(self.config.settings)
        manager.set(properties)
        logger.debug("已应用 {} 项启动设置", len(properties))

    def destruct(self) -> None:
        """恢复全部被覆盖的设置，清空尝试计数与宏缓存。之后不应再使用本对象。"""
        self.properties.reset_all()
        self.attempts.clear()
        self._cached_macro = None
        self._cached_autoattack = None

    def __enter__(self) -> Engine:
        return self

    def __exit__(self, *exc: object) -> None:
        self.destruct()

    # ═══════════════════════════════════════════════════════════════════════
    # 调度
    # ═══════════════════════════════════════════════════════════════════════

    def available(self, task: Task) -> bool:
        """任务当前是否可执行。

        直接依赖全部完成且 ``ready()`` 为真（若有）。依赖 *不* 传递检查：
        A 依赖 B、B 依赖 C 时，只要 B 完成 A 即可执行。

        Raises
        ------
        ConfigurationError
            依赖了不存在的任务。
        """
        if task.completed():
            return False
        for after in task.after:
            dependency = self.tasks_by_name.get(after)
            if dependency is None:
                raise ConfigurationError(f"Unknown task dependency {after} on {task.name}")
            if not dependency.completed():
                return False
        if task.ready is not None and not task.ready():
            return False
        return True

    def get_next_task(self) -> Task | None:
        """按声明顺序返回第一个可执行的任务。"""
        return next((task for task in self.tasks if self.available(task)), None)

    def run(self, actions: int | None = None) -> None:
        """持续选择并执行任务，直到没有可执行任务或达到 *actions* 次。"""
        performed = 0
        while actions is None or performed < actions:
            task = self.get_next_task()
            if task is None:
                logger.info("没有可执行的任务")
                return
            try:
                self.execute(task)
            except GrimoireError as e:
                logger.error("任务 {} 执行失败: {}", task.name, e)
                raise
            performed += 1

    # ═══════════════════════════════════════════════════════════════════════
    # 执行流水线
    # ═══════════════════════════════════════════════════════════════════════

    def execute(self, task: Task) -> None:
        """执行单个任务的完整流水线。

        无论哪一步抛出异常，尝试计数都恰好加一；任务未完成时检查限制。
        """
        with logger.contextualize(task=task.name):
            self._execute(task)

    def _execute(self, task: Task) -> None:
        logger.info("Executing {}", task.name)
        postcondition: Postcondition | None = None
        try:
            if task.limit is not None and task.limit.guard is not None:
                postcondition = task.limit.guard()

            self.acquire_items(task)
            self.acquire_effects(task)

            combat = task.combat.clone() if task.combat is not None else CombatStrategy()
            outfit = self.create_outfit(task)
            resources = CombatResources()
            self.customize(task, outfit, combat, resources)
            self.dress(task, outfit)

            self.set_combat(task, combat, resources)
            self.set_choices(task, self.properties)

            for resource in resources.all():
                if resource.prepare is not None:
                    resource.prepare()
            self.prepare(task)
            self.do(task)
            while self.should_repeat_adv(task):
                logger.info("遭遇游荡事件，重做 {}", task.name)
                self.settings.set("lastEncounter", "")
                self.do(task)
            self.post(task)
        finally:
            self.mark_attempt(task)

        if not task.completed():
            self.check_limits(task, postcondition)

    # ── 准备 ──

    def acquire_items(self, task: Task) -> None:
        """获取任务所需物品：自定义函数 → 限价购买 → 折叠 → 通用获取。"""
        for to_get in undelay(task.acquire):
            item = to_get.item
            num_have = self.session.item_amount(item) + self.session.equipped_amount(item)
            if to_get.num <= num_have:
                continue
            if to_get.useful is not None and not to_get.useful():
                continue
            logger.debug("获取 {} x{} (已有 {})", item, to_get.num, num_have)
            if to_get.get is not None:
                to_get.get()
            elif to_get.price is not None:
                self.session.buy(item, to_get.num - num_have, to_get.price)
            elif self.session.fold_relatives(item):
                self.session.fold(item)
            else:
                self.session.retrieve_item(item, to_get.num)

            num_have = self.session.item_amount(item) + self.session.equipped_amount(item)
            if num_have < to_get.num and not to_get.optional:
                raise AcquisitionError(task.name, item, to_get.num)

    def max_songs(self) -> int:
        return 4 if self.session.have_skill(SONG_CAP_SKILL) else 3

    def acquire_effects(self, task: Task) -> None:
        """获取任务所需状态；歌曲类状态超出上限时先移除多余的已有歌曲。"""
        effects = list(undelay(task.effects))
        songs = [effect for effect in effects if effect.song]
        cap = self.max_songs()
        if len(songs) > cap:
            raise EffectCapExceededError(task.name, len(songs), cap)

        extra = [e for e in self.session.my_effects() if e.song and e not in songs]
        while extra and len(songs) + len(extra) > cap:
            to_remove = extra.pop()
            logger.debug("移除歌曲 {} 以腾出位置", to_remove)
            self.session.uneffect(to_remove)

        for effect in effects:
            self.session.ensure_effect(effect)

    def create_outfit(self, task: Task) -> Outfit:
        """把任务的装备声明求解为 Outfit。

        Raises
        ------
        EquipError
            声明无法完全满足且未开启 ``allow_partial_outfit``。
        """
        spec = undelay(task.outfit)
        outfit = Outfit(self.session)
        if spec is None:
            return outfit
        if not outfit.equip(spec):
            detail = spec.to_dict() if isinstance(spec, OutfitSpec) else repr(spec)
            if not self.config.allow_partial_outfit:
                raise EquipError(task.name, str(detail))
            logger.warning("任务 {} 的装备未能完全满足: {}", task.name, detail)
        return outfit

    def customize(
        self,
        task: Task,
        outfit: Outfit,
        combat: CombatStrategy,
        resources: CombatResources,
    ) -> None:
        """引擎级定制钩子，默认不做任何事。

        适合在子类中覆盖以：

        - 为符号动作分配资源（如驱逐技能）
        - 补充默认装备
        - 在全局层面追加怪物宏
        """

    def dress(self, task: Task, outfit: Outfit) -> None:
        outfit.dress(self.maximizer)

    def set_combat(self, task: Task, combat: CombatStrategy, resources: CombatResources) -> None:
        """编译并安装战斗宏与自动攻击宏；文本未变化时不重复写入。"""
        location = task.location
        defaults = self.options.combat_defaults
        macro = str(combat.compile(resources, defaults, location))
        if macro != self._cached_macro:
            self.session.save_macro(macro)
            self._cached_macro = macro
        autoattack = str(combat.compile_autoattack(resources, defaults, location))
        if autoattack != self._cached_autoattack:
            self.session.set_autoattack(autoattack)
            self._cached_autoattack = autoattack

    def set_choices(self, task: Task, manager: PropertiesManager) -> None:
        choices = {choice_id: undelay(option) for choice_id, option in task.choices.items()}
        if choices:
            manager.set_choices(choices)

    def prepare(self, task: Task) -> None:
        if task.prepare is not None:
            task.prepare()

    # ── 执行 ──

    def do(self, task: Task) -> None:
        """执行任务主体，并把主体开启的战斗、随后的连续战斗与选项事件处理完。"""
        macro = self._cached_macro or ""
        if isinstance(task.do, Location):
            self.session.adv1(task.do, macro)
        else:
            task.do()
        if self.session.in_combat():
            self.session.run_combat(macro)
        while self.session.in_multi_fight():
            self.session.run_combat(macro)
        if self.session.choice_follows_fight():
            self.session.run_choice(-1)

    def should_repeat_adv(self, task: Task) -> bool:
        """上一次冒险是否遇到了游荡非战斗事件（仅地点任务）。"""
        if task.location is None:
            return False
        location = self.session.last_location() or task.location
        return last_encounter_was_wandering_nc(self.settings, location, self.wanderers)

    def post(self, task: Task) -> None:
        if task.post is not None:
            task.post()

    # ── 收尾 ──

    def mark_attempt(self, task: Task) -> None:
        self.attempts[task.name] = self.attempts.get(task.name, 0) + 1

    def check_limits(self, task: Task, postcondition: Postcondition | None = None) -> None:
        location = task.location
        turns = self.session.turns_spent(location) if location is not None else None
        check_limits(task, self.attempts.get(task.name, 0), turns, postcondition)
