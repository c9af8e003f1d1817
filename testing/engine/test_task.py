"""任务声明与延迟值测试。"""

from __future__ import annotations

import dataclasses

import pytest

from grimoire.engine import AcquireItem, Lazy, Task, delay, quest_step, undelay
from grimoire.infra.exceptions import ConfigurationError
from grimoire.types import Item, Location

ZONE = Location("The Haunted Kitchen")


class TestLazy:
    def test_undelay_plain(self):
        assert undelay(3) == 3

    def test_resolved_each_time(self):
        counter = {"n": 0}

        def factory() -> int:
            counter["n"] += 1
            return counter["n"]

        lazy = Lazy(factory)
        assert undelay(lazy) == 1
        assert undelay(lazy) == 2

    def test_delay_wraps_callable(self):
        assert isinstance(delay(lambda: 1), Lazy)
        assert delay([1, 2]) == [1, 2]

    def test_delay_keeps_lazy(self):
        lazy = Lazy(lambda: 1)
        assert delay(lazy) is lazy


class TestTask:
    def test_defaults(self):
        task = Task(name="T", completed=lambda: False, do=ZONE)
        assert task.after == ()
        assert task.ready is None
        assert task.location == ZONE
        assert undelay(task.acquire) == ()
        assert undelay(task.outfit) is None

    def test_callable_do_has_no_location(self):
        assert Task(name="T", completed=lambda: False, do=lambda: None).location is None

    def test_after_normalized(self):
        task = Task(name="T", completed=lambda: False, do=ZONE, after=["A", "B"])
        assert task.after == ("A", "B")

    def test_delayed_fields(self):
        item = Item("bat wing")
        task = Task(
            name="T",
            completed=lambda: False,
            do=ZONE,
            acquire=lambda: [AcquireItem(item)],
            choices={"123": lambda: 2},
        )
        assert isinstance(task.acquire, Lazy)
        assert undelay(task.acquire)[0].item == item
        assert undelay(task.choices[123]) == 2

    def test_frozen(self):
        task = Task(name="T", completed=lambda: False, do=ZONE)
        with pytest.raises(dataclasses.FrozenInstanceError):
            task.name = "other"

    def test_identity_equality(self):
        first = Task(name="T", completed=lambda: False, do=ZONE)
        second = Task(name="T", completed=lambda: False, do=ZONE)
        assert first != second
        assert repr(first) == "Task('T')"


class TestQuestStep:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("unstarted", -1), ("started", 0), ("step3", 3), ("finished", 999)],
    )
    def test_values(self, settings, value, expected):
        settings.set("questL04Bat", value)
        assert quest_step(settings, "questL04Bat") == expected

    def test_unknown(self, settings):
        settings.set("questL04Bat", "stepX")
        with pytest.raises(ConfigurationError, match="questL04Bat"):
            quest_step(settings, "questL04Bat")
