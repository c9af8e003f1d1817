"""游荡非战斗事件 — 需要立即重做当前冒险（不重新准备）的事件。

三张表：

- ``WANDERING_NCS``：任何地点都可能出现的事件
- 环境表：只在特定环境（室内 / 室外 / 地下）出现的事件
- 地点表：事件名与地点固有事件重名时，按地点名单独列出

事件名支持 ``*`` 通配（如 ``Playing Fetch*``）。
"""

from __future__ import annotations

from collections.abc import Iterable
from fnmatch import fnmatchcase

from grimoire.session.settings import SettingsStore
from grimoire.types import Environment, Location

WANDERING_NCS: frozenset[str] = frozenset(
    {
        "Wooof! Wooooooof!",
        "Playing Fetch*",
        "A Pound of Cure",
        "Aunts not Ants",
        "Bath Time",
        "Beware of Aligator",
        "Delicious Sprouts",
        "Hypnotic Master",
        "Lost and Found",
        "Poetic Justice",
        "Summer Days",
        "Teacher's Pet",
    }
)
"""不限地点的游荡事件（万圣节狗、六月切肉刀、小医生包）。"""


class WanderingNCTable:
    """游荡事件判定表。"""

    def __init__(self, general: Iterable[str] = WANDERING_NCS) -> None:
        self.general: set[str] = set(general)
        self.by_environment: dict[Environment, set[str]] = {}
        self.by_location: dict[str, set[str]] = {}

    def register_environment(self, environment: Environment, *names: str) -> None:
        self.by_environment.setdefault(environment, set()).update(names)

    def register_location(self, location: str, *names: str) -> None:
        self.by_location.setdefault(location, set()).update(names)

    def copy(self) -> WanderingNCTable:
        """深拷贝三张表；副本上的注册不影响原表。"""
        table = WanderingNCTable(self.general)
        table.by_environment = {env: set(names) for env, names in self.by_environment.items()}
        table.by_location = {loc: set(names) for loc, names in self.by_location.items()}
        return table

    def matches(self, encounter: str, location: Location | None = None) -> bool:
        """*encounter* 是否为在 *location* 发生的游荡事件。"""
        if not encounter:
            return False
        if _match_any(encounter, self.general):
            return True
        if location is None:
            return False
        if _match_any(encounter, self.by_environment.get(location.environment, ())):
            return True
        return _match_any(encounter, self.by_location.get(location.name, ()))


DEFAULT_WANDERERS = WanderingNCTable()


def last_encounter_was_wandering_nc(
    settings: SettingsStore,
    location: Location | None = None,
    table: WanderingNCTable = DEFAULT_WANDERERS,
) -> bool:
    """上一次遭遇（``lastEncounter``）是否为游荡非战斗事件。

    Parameters
    ----------
    settings:
        设置存储。
    location:
        上一次冒险的地点，用于环境表与地点表的判定。
    table:
        判定表。
    """
    return table.matches(str(settings.get("lastEncounter", "")), location)


def _match_any(encounter: str, patterns: Iterable[str]) -> bool:
    return any(fnmatchcase(encounter, pattern) for pattern in patterns)
