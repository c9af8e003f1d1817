"""任务组合测试。"""

from __future__ import annotations

import pytest

from grimoire.engine import AcquireItem, Limit, Task, extend_task, override_task, undelay
from grimoire.infra.exceptions import TaskPartialError
from grimoire.outfit import OutfitSpec
from grimoire.types import Effect, Item, Location, Slot

HAT = Item("helmet turtle", Slot.hat)
SABER = Item("Fourth of May Cosplay Saber", Slot.weapon, hands=1)
ZONE = Location("The Haunted Pantry")


class TestExtendTask:
    def test_from_partial_dict(self):
        base = {"name": "Void Monster", "ready": lambda: True}
        task = extend_task(base, completed=lambda: False, do=ZONE)
        assert isinstance(task, Task)
        assert task.name == "Void Monster"
        assert task.do == ZONE
        assert task.ready()

    def test_missing_required(self):
        with pytest.raises(TaskPartialError) as exc_info:
            extend_task({"name": "Incomplete"}, ready=lambda: True)
        assert exc_info.value.missing == ["completed", "do"]

    def test_completed_either(self):
        state = {"base": False, "new": False}
        base = {"name": "T", "do": ZONE, "completed": lambda: state["base"]}
        task = extend_task(base, completed=lambda: state["new"])
        assert not task.completed()
        state["base"] = True
        assert task.completed()
        state["base"], state["new"] = False, True
        assert task.completed()

    def test_ready_both(self):
        base = {"name": "T", "do": ZONE, "completed": lambda: False, "ready": lambda: True}
        assert not extend_task(base, ready=lambda: False).ready()
        assert extend_task(base, ready=lambda: True).ready()

    def test_do_chained_options_first(self):
        order: list[str] = []
        base = {"name": "T", "completed": lambda: False, "do": lambda: order.append("base")}
        extend_task(base, do=lambda: order.append("new")).do()
        assert order == ["new", "base"]

    def test_location_do_overrides(self):
        base = {"name": "T", "completed": lambda: False, "do": lambda: None}
        assert extend_task(base, do=ZONE).do == ZONE

    def test_hooks_chained(self):
        order: list[str] = []
        base = {
            "name": "T",
            "completed": lambda: False,
            "do": ZONE,
            "prepare": lambda: order.append("base prepare"),
            "post": lambda: order.append("base post"),
        }
        task = extend_task(
            base,
            prepare=lambda: order.append("new prepare"),
            post=lambda: order.append("new post"),
        )
        task.prepare()
        task.post()
        assert order == ["new prepare", "base prepare", "new post", "base post"]

    def test_lists_concatenated(self):
        base = {
            "name": "T",
            "completed": lambda: False,
            "do": ZONE,
            "acquire": [AcquireItem(HAT)],
            "effects": lambda: [Effect("Empathy")],
        }
        task = extend_task(base, acquire=[AcquireItem(SABER)], effects=[Effect("Leash")])
        assert [a.item for a in undelay(task.acquire)] == [SABER, HAT]
        assert undelay(task.effects) == [Effect("Leash"), Effect("Empathy")]

    def test_choices_merged(self):
        base = {"name": "T", "completed": lambda: False, "do": ZONE, "choices": {1: 1, 2: 2}}
        task = extend_task(base, choices={2: 3})
        assert {k: undelay(v) for k, v in task.choices.items()} == {1: 1, 2: 3}

    def test_limit_merged(self):
        base = {"name": "T", "completed": lambda: False, "do": ZONE, "limit": Limit(tries=5)}
        task = extend_task(base, limit=Limit(turns=10))
        assert task.limit == Limit(tries=5, turns=10)

    def test_outfit_merged(self):
        base = {
            "name": "T",
            "completed": lambda: False,
            "do": ZONE,
            "outfit": OutfitSpec(hat=HAT, modifier="item"),
        }
        task = extend_task(base, outfit=lambda: OutfitSpec(weapon=SABER, modifier="meat"))
        spec = undelay(task.outfit)
        assert spec.hat == HAT
        assert spec.weapon == SABER
        assert spec.modifier == ["meat"]

    def test_extends_task_instance(self):
        base = Task(name="T", completed=lambda: False, do=ZONE, after=["A"])
        task = extend_task(base, name="T2", after=["B"])
        assert task.name == "T2"
        assert task.after == ("B",)
        assert task.do == ZONE


class TestOverrideTask:
    def test_replaces_fields(self):
        order: list[str] = []
        base = {"name": "T", "completed": lambda: False, "do": lambda: order.append("base")}
        task = override_task(base, do=lambda: order.append("new"))
        task.do()
        assert order == ["new"]

    def test_missing_required(self):
        with pytest.raises(TaskPartialError):
            override_task({"name": "T"})
