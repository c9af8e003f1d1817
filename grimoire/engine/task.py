"""任务声明 — Task / Quest / AcquireItem。

任务是不可变的声明：何时可做 (``after`` / ``ready``)、何时已完成
(``completed``)、如何执行 (``prepare`` → ``do`` → ``post``)，以及执行前
需要准备的物品、状态、选项、装备与作战策略。

``acquire`` / ``effects`` / ``outfit`` / ``choices`` 的值既可以是字面值，
也可以是无参函数；函数在构造时包装为 :class:`~grimoire.engine.lazy.Lazy`，
由引擎在使用时求值。
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Union

from grimoire.combat.strategy import CombatStrategy
from grimoire.engine.lazy import Delayed, delay
from grimoire.engine.limit import Limit
from grimoire.infra.exceptions import ConfigurationError
from grimoire.outfit.outfit import Outfit
from grimoire.outfit.spec import OutfitSpec
from grimoire.session.settings import SettingsStore
from grimoire.types import Effect, Item, Location

TaskAction = Union[Location, Callable[[], None]]
"""任务主体：冒险地点，或直接调用的函数。"""


@dataclass(frozen=True)
class AcquireItem:
    """执行前需要持有的物品。

    Attributes
    ----------
    item:
        物品。
    num:
        需要的数量（背包 + 已装备）。
    price:
        给出时以不高于该价格购买。
    useful:
        返回 ``False`` 时跳过获取。
    optional:
        获取失败时不报错。
    get:
        自定义获取函数，优先于其他所有方式。
    """

    item: Item
    num: int = 1
    price: int | None = None
    useful: Callable[[], bool] | None = None
    optional: bool = False
    get: Callable[[], None] | None = None


@dataclass(frozen=True, eq=False)
class Task:
    """一个任务（工作单元）。

    除引擎按任务名维护的尝试计数外，任务在运行期间不会被修改。
    """

    name: str
    completed: Callable[[], bool]
    do: TaskAction
    after: Sequence[str] = ()
    ready: Callable[[], bool] | None = None
    prepare: Callable[[], None] | None = None
    post: Callable[[], None] | None = None
    acquire: Delayed[Sequence[AcquireItem]] = ()
    effects: Delayed[Sequence[Effect]] = ()
    choices: Mapping[int, Delayed[int]] = field(default_factory=dict)
    limit: Limit | None = None
    outfit: Delayed[OutfitSpec | Outfit | None] = None
    combat: CombatStrategy | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "after", tuple(self.after))
        object.__setattr__(self, "acquire", delay(self.acquire))
        object.__setattr__(self, "effects", delay(self.effects))
        object.__setattr__(self, "outfit", delay(self.outfit))
        object.__setattr__(
            self, "choices", {int(k): delay(v) for k, v in self.choices.items()}
        )

    @property
    def location(self) -> Location | None:
        """``do`` 为地点时返回该地点。"""
        return self.do if isinstance(self.do, Location) else None

    def __repr__(self) -> str:
        return f"Task({self.name!r})"


@dataclass
class Quest:
    """一组相关任务。

    ``completed`` 会与每个任务自身的 ``completed`` 取或，``ready`` 取与；
    组装时任务名与任务间依赖加上 ``quest/`` 前缀，见 :func:`~grimoire.engine.route.get_tasks`。
    """

    name: str
    tasks: list[Task] = field(default_factory=list)
    completed: Callable[[], bool] | None = None
    ready: Callable[[], bool] | None = None


def quest_step(settings: SettingsStore, key: str) -> int:
    """把任务线进度设置解析为数值。

    ``unstarted`` → -1，``started`` → 0，``stepN`` → N，``finished`` → 999。

    Raises
    ------
    ConfigurationError
        无法解析的进度值。
    """
    value = str(settings.get(key, ""))
    if value == "unstarted":
        return -1
    if value == "started":
        return 0
    if value == "finished":
        return 999
    if value.startswith("step") and value[4:].isdigit():
        return int(value[4:])
    raise ConfigurationError(f"Quest state parsing error: {key}={value!r}")
