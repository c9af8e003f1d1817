"""任务组装与路线排序测试。"""

from __future__ import annotations

import pytest

from grimoire.engine import Quest, Task, get_tasks, order_by_route
from grimoire.infra.exceptions import ConfigurationError


def make_task(name: str, after=(), completed=lambda: False, ready=None) -> Task:
    return Task(name=name, completed=completed, do=lambda: None, after=after, ready=ready)


def names(tasks) -> list[str]:
    return [task.name for task in tasks]


class TestGetTasks:
    def test_prefixes_names_and_dependencies(self):
        quests = [
            Quest("Mosquito", [make_task("Start"), make_task("Burn", after=["Start"])]),
            Quest("Tavern", [make_task("Rats", after=["Mosquito/Burn"])]),
        ]
        tasks = get_tasks(quests)
        assert names(tasks) == ["Mosquito/Start", "Mosquito/Burn", "Tavern/Rats"]
        assert tasks[1].after == ("Mosquito/Start",)
        assert tasks[2].after == ("Mosquito/Burn",)

    def test_originals_untouched(self):
        original = make_task("Start")
        get_tasks([Quest("Mosquito", [original])])
        assert original.name == "Start"

    def test_quest_completed_or(self):
        quest_done = {"value": False}
        task = make_task("Start", completed=lambda: False)
        (result,) = get_tasks([Quest("Q", [task], completed=lambda: quest_done["value"])])
        assert not result.completed()
        quest_done["value"] = True
        assert result.completed()

    def test_quest_ready_and(self):
        task = make_task("Start", ready=lambda: True)
        (result,) = get_tasks([Quest("Q", [task], ready=lambda: False)])
        assert not result.ready()

    def test_quest_ready_only(self):
        (result,) = get_tasks([Quest("Q", [make_task("Start")], ready=lambda: True)])
        assert result.ready()

    def test_no_ready_anywhere(self):
        (result,) = get_tasks([Quest("Q", [make_task("Start")])])
        assert result.ready is None

    def test_unknown_dependency(self):
        with pytest.raises(ConfigurationError, match="Q/Missing"):
            get_tasks([Quest("Q", [make_task("Start", after=["Missing"])])])


class TestOrderByRoute:
    def test_route_then_dependencies(self):
        tasks = [
            make_task("A"),
            make_task("B"),
            make_task("C", after=["B"]),
            make_task("D"),
        ]
        ordered = order_by_route(tasks, ["D", "C"])
        assert names(ordered) == ["D", "B", "C", "A"]

    def test_recursive_dependencies(self):
        tasks = [make_task("A"), make_task("B", after=["A"]), make_task("C", after=["B"])]
        assert names(order_by_route(tasks, ["C"])) == ["A", "B", "C"]

    def test_earlier_priority_kept(self):
        tasks = [make_task("A"), make_task("B", after=["A"]), make_task("X")]
        ordered = order_by_route(tasks, ["A", "X", "B"])
        assert names(ordered) == ["A", "X", "B"]

    def test_stable_for_unrouted(self):
        tasks = [make_task(n) for n in "EDCBA"]
        assert names(order_by_route(tasks, [])) == list("EDCBA")

    def test_unknown_routing_task(self):
        with pytest.raises(ConfigurationError, match="Nowhere"):
            order_by_route([make_task("A")], ["Nowhere"])

    def test_ignore_missing(self):
        tasks = [make_task("A"), make_task("B")]
        assert names(order_by_route(tasks, ["Nowhere", "B"], ignore_missing_tasks=True)) == [
            "B",
            "A",
        ]
