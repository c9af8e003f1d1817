"""可切换模式的装备 — 模式声明、合并规则与当前模式读取。

每件可切换物品对应一个模式命令（如 ``umbrella``）。复古披风的模式由
「超级英雄」与「洗涤说明」两部分组成，两部分可以分别设置，
未设置的部分与任何值兼容。
"""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel

from grimoire.session.settings import SettingsStore

BackupCameraMode = Literal["ml", "meat", "init"]
UmbrellaMode = Literal[
    "broken",
    "forward-facing",
    "bucket style",
    "pitchfork style",
    "constantly twirling",
    "cocoon",
]
SnowsuitMode = Literal["eyebrows", "smirk", "nose", "goatee", "hat"]
EdpieceMode = Literal["bear", "owl", "puma", "hyena", "mouse", "weasel", "fish"]
RetrocapeHero = Literal["vampire", "heck", "robot"]
RetrocapeInstruction = Literal["hold", "thrill", "kiss", "kill"]
ParkaMode = Literal["kachungasaur", "dilophosaur", "ghostasaurus", "spikolodon", "pterodactyl"]

MODEABLE_ITEMS: dict[str, str] = {
    "backupcamera": "backup camera",
    "umbrella": "unbreakable umbrella",
    "snowsuit": "Snow Suit",
    "edpiece": "The Crown of Ed the Undying",
    "retrocape": "unwrapped knock-off retro superhero cape",
    "parka": "Jurassic Parka",
}
"""模式命令 → 对应物品名。"""

_SIMPLE_MODES = ("backupcamera", "umbrella", "snowsuit", "edpiece", "parka")


class Modes(BaseModel):
    """装备模式选择；``None`` 表示不关心。"""

    model_config = {"frozen": True}

    backupcamera: BackupCameraMode | None = None
    umbrella: UmbrellaMode | None = None
    snowsuit: SnowsuitMode | None = None
    edpiece: EdpieceMode | None = None
    retrocape: tuple[RetrocapeHero | None, RetrocapeInstruction | None] | None = None
    parka: ParkaMode | None = None

    @property
    def is_empty(self) -> bool:
        return not self.to_commands()

    def merge(self, other: Modes) -> tuple[Modes, bool]:
        """将 *other* 合并到当前模式之上。

        已设置的值在冲突时保留，冲突仅使返回的兼容标记为 ``False``，
        不影响其他模式的合并。

        Returns
        -------
        tuple[Modes, bool]
            合并后的模式，以及是否完全兼容。
        """
        compatible = True
        merged: dict[str, object] = {}
        for name in _SIMPLE_MODES:
            mine = getattr(self, name)
            theirs = getattr(other, name)
            if mine is not None and theirs is not None and mine != theirs:
                compatible = False
            merged[name] = mine if mine is not None else theirs

        mine_cape = self.retrocape or (None, None)
        theirs_cape = other.retrocape or (None, None)
        cape: list[str | None] = []
        for part_mine, part_theirs in zip(mine_cape, theirs_cape):
            if part_mine is not None and part_theirs is not None and part_mine != part_theirs:
                compatible = False
            cape.append(part_mine if part_mine is not None else part_theirs)
        merged["retrocape"] = None if cape == [None, None] else tuple(cape)

        return Modes.model_validate(merged), compatible

    def to_commands(self) -> dict[str, str]:
        """转换为 ``{命令: 模式}``；披风两部分以空格连接，省略未设置部分。"""
        commands: dict[str, str] = {}
        for name in _SIMPLE_MODES:
            value = getattr(self, name)
            if value is not None:
                commands[name] = value
        if self.retrocape is not None:
            cape = " ".join(part for part in self.retrocape if part is not None)
            if cape:
                commands["retrocape"] = cape
        return commands


def _read_mode(settings: SettingsStore, key: str, options: type) -> str | None:
    """读取设置值，仅当其为合法选项时返回。"""
    value = settings.get(key, "")
    return value if value in get_args(options) else None


def current_modes(settings: SettingsStore) -> Modes:
    """从设置存储读取所有可切换物品的当前模式（无论是否装备）。"""
    hero = _read_mode(settings, "retroCapeSuperhero", RetrocapeHero)
    instruction = _read_mode(settings, "retroCapeWashingInstructions", RetrocapeInstruction)
    return Modes(
        backupcamera=_read_mode(settings, "backupCameraMode", BackupCameraMode),
        umbrella=_read_mode(settings, "umbrellaState", UmbrellaMode),
        snowsuit=_read_mode(settings, "snowsuit", SnowsuitMode),
        edpiece=_read_mode(settings, "edPiece", EdpieceMode),
        retrocape=None if hero is None and instruction is None else (hero, instruction),
        parka=_read_mode(settings, "parkaMode", ParkaMode),
    )
