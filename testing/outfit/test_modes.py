"""装备模式测试。"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from grimoire.outfit import MODEABLE_ITEMS, Modes, current_modes


class TestModes:
    def test_empty(self):
        assert Modes().is_empty
        assert Modes().to_commands() == {}

    def test_invalid_value_rejected(self):
        with pytest.raises(ValidationError):
            Modes(umbrella="inside out")

    def test_frozen(self):
        with pytest.raises(ValidationError):
            Modes().umbrella = "cocoon"

    def test_every_mode_names_an_item(self):
        assert set(Modes.model_fields) == set(MODEABLE_ITEMS)


class TestMerge:
    def test_disjoint(self):
        merged, ok = Modes(umbrella="cocoon").merge(Modes(parka="spikolodon"))
        assert ok
        assert merged == Modes(umbrella="cocoon", parka="spikolodon")

    def test_same_value_compatible(self):
        merged, ok = Modes(edpiece="fish").merge(Modes(edpiece="fish"))
        assert ok
        assert merged.edpiece == "fish"

    def test_conflict_keeps_existing(self):
        merged, ok = Modes(edpiece="fish", snowsuit="nose").merge(
            Modes(edpiece="bear", backupcamera="meat")
        )
        assert not ok
        assert merged.edpiece == "fish"
        assert merged.backupcamera == "meat"
        assert merged.snowsuit == "nose"

    def test_retrocape_parts(self):
        merged, ok = Modes(retrocape=("vampire", None)).merge(Modes(retrocape=(None, "hold")))
        assert ok
        assert merged.retrocape == ("vampire", "hold")

    def test_retrocape_conflict(self):
        merged, ok = Modes(retrocape=("vampire", "hold")).merge(Modes(retrocape=("heck", None)))
        assert not ok
        assert merged.retrocape == ("vampire", "hold")


class TestCommands:
    def test_retrocape_joined(self):
        assert Modes(retrocape=("robot", "kill")).to_commands() == {"retrocape": "robot kill"}

    def test_retrocape_partial(self):
        assert Modes(retrocape=(None, "thrill")).to_commands() == {"retrocape": "thrill"}

    def test_simple(self):
        commands = Modes(backupcamera="ml", parka="dilophosaur").to_commands()
        assert commands == {"backupcamera": "ml", "parka": "dilophosaur"}


class TestCurrentModes:
    def test_reads_settings(self, settings):
        settings.set("backupCameraMode", "init")
        settings.set("retroCapeSuperhero", "heck")
        settings.set("parkaMode", "pterodactyl")
        modes = current_modes(settings)
        assert modes.backupcamera == "init"
        assert modes.retrocape == ("heck", None)
        assert modes.parka == "pterodactyl"
        assert modes.umbrella is None

    def test_ignores_unknown_values(self, settings):
        settings.set("umbrellaState", "sideways")
        settings.set("edPiece", "")
        assert current_modes(settings).is_empty
