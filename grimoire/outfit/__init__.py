"""装备系统 — 装备声明、求解与穿戴提交。

模块组成::

    outfit/
    ├── modes.py    # 可切换装备的模式
    ├── spec.py     # 声明式装备 (OutfitSpec)
    ├── outfit.py   # 装备求解器 (Outfit)
    └── dress.py    # 穿戴提交

典型使用::

    from grimoire.outfit import Outfit, OutfitSpec

    outfit = Outfit(session)
    if not outfit.equip(OutfitSpec(weapon=saber, modifier="item")):
        ...
    outfit.dress(maximizer)
"""

from .dress import RIDER_CARRIERS, dress_outfit
from .modes import MODEABLE_ITEMS, Modes, current_modes
from .outfit import DUAL_WIELD_SKILL, OFFHAND_HOLDER, WEAPON_HOLDER, Outfit
from .spec import OutfitSpec

__all__ = [
    "DUAL_WIELD_SKILL",
    "MODEABLE_ITEMS",
    "OFFHAND_HOLDER",
    "RIDER_CARRIERS",
    "WEAPON_HOLDER",
    "Modes",
    "Outfit",
    "OutfitSpec",
    "current_modes",
    "dress_outfit",
]
