"""战斗宏 — 安装到游戏中的字面战斗脚本。

宏由若干命令组成，渲染为以 ``;`` 结尾的命令序列::

    Macro().if_(Macro.monster_condition(goblin), Macro().skill(banish)).attack()
    # → "if monsterid 12;skill Banish;endif;attack;"
"""

from __future__ import annotations

from grimoire.types import Item, Monster, Skill


class Macro:
    """战斗宏构造器（链式调用，原地修改并返回自身）。"""

    def __init__(self, *steps: Macro | str) -> None:
        self._components: list[str] = []
        self.step(*steps)

    # ── 基本组合 ──

    def step(self, *steps: Macro | str | None) -> Macro:
        """追加命令或其他宏的全部命令。"""
        for step in steps:
            if step is None:
                continue
            if isinstance(step, Macro):
                self._components.extend(step._components)
            else:
                self._components.extend(_split_commands(step))
        return self

    def if_(self, condition: str, then: Macro | str) -> Macro:
        """条件块：``if <condition>; ...; endif``。"""
        body = then if isinstance(then, Macro) else Macro(then)
        if body.is_empty:
            return self
        self._components.append(f"if {condition}")
        self._components.extend(body._components)
        self._components.append("endif")
        return self

    # ── 常用命令 ──

    def item(self, *items: Item) -> Macro:
        """使用战斗物品（最多两件同时使用）。"""
        if not 1 <= len(items) <= 2:
            raise ValueError(f"一次只能使用 1–2 件物品，实际 {len(items)} 件")
        return self.step("use " + ", ".join(i.name for i in items))

    def skill(self, skill: Skill) -> Macro:
        return self.step(f"skill {skill.name}")

    def try_skill(self, skill: Skill) -> Macro:
        """拥有该技能时才施放。"""
        return self.if_(f"hasskill {skill.name}", Macro().skill(skill))

    def try_item(self, item: Item) -> Macro:
        """持有该战斗物品时才使用。"""
        return self.if_(f"hascombatitem {item.name}", Macro().item(item))

    def attack(self) -> Macro:
        return self.step("attack")

    def runaway(self) -> Macro:
        return self.step("runaway")

    def abort(self, message: str = "") -> Macro:
        return self.step(f'abort "{message}"' if message else "abort")

    # ── 工具 ──

    @staticmethod
    def monster_condition(monster: Monster) -> str:
        """怪物判定条件 ``monsterid N``。"""
        return f"monsterid {monster.id}"

    @property
    def is_empty(self) -> bool:
        return not self._components

    def copy(self) -> Macro:
        return Macro(self)

    def __str__(self) -> str:
        if not self._components:
            return ""
        return ";".join(self._components) + ";"

    def __repr__(self) -> str:
        return f"Macro({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Macro):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))


def _split_commands(text: str) -> list[str]:
    """按 ``;`` 拆分命令，双引号内的 ``;`` 不拆分。"""
    commands: list[str] = []
    current: list[str] = []
    quoted = False
    for char in text:
        if char == '"':
            quoted = not quoted
        elif char == ";" and not quoted:
            commands.append("".join(current))
            current = []
            continue
        current.append(char)
    commands.append("".join(current))
    return [c.strip() for c in commands if c.strip()]
