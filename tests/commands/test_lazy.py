"""Tests for lazy commands: deferred input evaluation and restriction."""

from __future__ import annotations

from typing import Any

import pytest

from rommap.commands import Composite, Graph, Lazy
from rommap.commands.lazy import resolve_path
from rommap.environment import Container, Setup
from rommap.errors import CommandFailure, InvalidOptionsError
from rommap.relation import Relation
from tests.conftest import match_array


class Users(Relation):
    name = "users"

    def by_name(self, name: str) -> Users:
        return self.restrict(name=name)


class Tasks(Relation):
    name = "tasks"
    primary_key = ("title",)

    def by_user(self, user: str) -> Tasks:
        return self.restrict(user=user)

    def by_user_and_title(self, user: str, title: str) -> Tasks:
        return self.by_user(user).restrict(title=title)


@pytest.fixture
def rom(rom_setup: Setup) -> Container:
    rom_setup.relation(Users)
    rom_setup.relation(Tasks)
    rom_setup.commands("users").define("create", result="one")
    rom_setup.commands("users").define("update", result="one")
    rom_setup.commands("tasks").define("create", associates={"user": "name"})
    rom_setup.commands("tasks").define("update")
    rom_setup.commands("tasks").define("delete")
    container = rom_setup.finalize()

    users = container.relation("users")
    users.insert({"name": "Jane", "email": "jane@doe.org"})
    users.insert({"name": "Joe", "email": "joe@doe.org"})
    tasks = container.relation("tasks")
    tasks.insert({"title": "Task One", "user": "Jane", "priority": 1})
    tasks.insert({"title": "Task Two", "user": "Jane", "priority": 1})
    tasks.insert({"title": "Task Three", "user": "Joe", "priority": 1})
    return container


class TestLazyCreate:
    def test_evaluates_input_before_calling(self, rom: Container) -> None:
        lazy = rom.command("users").create.with_input(lambda input_: input_["user"])

        result = lazy.call({"user": {"name": "Jack", "email": "jack@doe.org"}})

        assert result == {"name": "Jack", "email": "jack@doe.org"}
        assert rom.relation("users").by_name("Jack").one() == result

    def test_runs_once_per_parent_tuple(self, rom: Container) -> None:
        input_ = {
            "users": [
                {"name": "Jack", "tasks": [{"title": "Jack One"}]},
                {"name": "Jill", "tasks": [{"title": "Jill One"}, {"title": "Jill Two"}]},
            ]
        }
        lazy = rom.command("tasks").create.with_input(
            lambda input_, index: input_["users"][index]["tasks"]
        )

        result = lazy.call(input_, [{"name": "Jack"}, {"name": "Jill"}])

        match_array(
            result,
            [
                {"title": "Jack One", "user": "Jack"},
                {"title": "Jill One", "user": "Jill"},
                {"title": "Jill Two", "user": "Jill"},
            ],
        )

    def test_evaluator_errors_become_command_failures(self, rom: Container) -> None:
        lazy = rom.command("users").create.with_input(lambda input_: input_["person"])

        with pytest.raises(CommandFailure, match="person"):
            lazy.call({"user": {"name": "Jack"}})


class TestLazyUpdate:
    def test_restricts_through_a_view(self, rom: Container) -> None:
        lazy = rom.command("users").update.with_input(
            lambda input_: input_["user"], ("by_name", ["user.name"])
        )

        result = lazy.call({"user": {"name": "Jane", "email": "jane.doe@example.org"}})

        assert result == {"name": "Jane", "email": "jane.doe@example.org"}
        match_array(
            rom.relation("users"),
            [
                {"name": "Jane", "email": "jane.doe@example.org"},
                {"name": "Joe", "email": "joe@doe.org"},
            ],
        )

    def test_restricts_a_child_by_several_paths(self, rom: Container) -> None:
        lazy = rom.command("tasks").update.with_input(
            lambda input_: input_["user"]["task"],
            ("by_user_and_title", ["user.name", "user.task.title"]),
        )

        lazy.call({"user": {"name": "Jane", "task": {"title": "Task One", "priority": 3}}})

        match_array(
            rom.relation("tasks"),
            [
                {"title": "Task One", "user": "Jane", "priority": 3},
                {"title": "Task Two", "user": "Jane", "priority": 1},
                {"title": "Task Three", "user": "Joe", "priority": 1},
            ],
        )

    def test_restricts_each_child_of_a_collection(self, rom: Container) -> None:
        lazy = rom.command("tasks").update.with_input(
            lambda input_: input_["user"]["tasks"],
            ("by_user_and_title", ["user.name", "user.tasks.title"]),
        )

        result = lazy.call(
            {
                "user": {
                    "name": "Jane",
                    "tasks": [
                        {"title": "Task One", "priority": 2},
                        {"title": "Task Two", "priority": 3},
                    ],
                }
            }
        )

        assert len(result) == 2
        match_array(
            rom.relation("tasks"),
            [
                {"title": "Task One", "user": "Jane", "priority": 2},
                {"title": "Task Two", "user": "Jane", "priority": 3},
                {"title": "Task Three", "user": "Joe", "priority": 1},
            ],
        )

    def test_primary_key_restricts_without_a_restriction(self, rom: Container) -> None:
        lazy = rom.command("tasks").update.with_input(lambda input_: input_["tasks"])

        lazy.call({"tasks": [{"title": "Task Three", "priority": 5}]})

        assert rom.relation("tasks").restrict(title="Task Three").one() == {
            "title": "Task Three",
            "user": "Joe",
            "priority": 5,
        }
        assert rom.relation("tasks").restrict(priority=5).count() == 1

    def test_callable_restriction(self, rom: Container) -> None:
        def restriction(command: Any, parent: Any, tuple_: Any) -> Any:
            return command.by_user(parent["name"])

        lazy = rom.command("tasks").update.with_input(
            lambda input_: input_["changes"], restriction
        )

        lazy.call({"changes": {"priority": 9}}, {"name": "Joe"})

        assert [t["priority"] for t in rom.relation("tasks").by_user("Joe")] == [9]
        assert [t["priority"] for t in rom.relation("tasks").by_user("Jane")] == [1, 1]

    def test_restricts_per_parent_by_index_then_item(self, rom: Container) -> None:
        input_ = {
            "users": [
                {"name": "Jane", "tasks": [{"title": "Task One", "priority": 7}]},
                {"name": "Joe", "tasks": [{"title": "Task Three", "priority": 8}]},
            ]
        }
        lazy = rom.command("tasks").update.with_input(
            lambda input_, index: input_["users"][index]["tasks"],
            ("by_user_and_title", ["users.name", "users.tasks.title"]),
        )

        result = lazy.call(input_, [{"name": "Jane"}, {"name": "Joe"}])

        assert len(result) == 2
        match_array(
            rom.relation("tasks"),
            [
                {"title": "Task One", "user": "Jane", "priority": 7},
                {"title": "Task Two", "user": "Jane", "priority": 1},
                {"title": "Task Three", "user": "Joe", "priority": 8},
            ],
        )

    def test_malformed_restriction(self, rom: Container) -> None:
        with pytest.raises(InvalidOptionsError):
            rom.command("tasks").update.with_input(lambda input_: input_, ["by_user"])


class TestLazyDelete:
    def test_deletes_the_restricted_tuples(self, rom: Container) -> None:
        lazy = rom.command("tasks").delete.with_input(
            lambda input_: input_["user"], ("by_user", ["user.name"])
        )

        removed = lazy.call({"user": {"name": "Jane"}})

        assert sorted(t["title"] for t in removed) == ["Task One", "Task Two"]
        match_array(rom.relation("tasks"), [{"title": "Task Three", "user": "Joe", "priority": 1}])

    def test_deletes_per_parent_by_primary_key(self, rom: Container) -> None:
        input_ = {
            "users": [
                {"name": "Jane", "tasks": [{"title": "Task Two"}]},
                {"name": "Joe", "tasks": [{"title": "Task Three"}]},
            ]
        }
        lazy = rom.command("tasks").delete.with_input(
            lambda input_, index: input_["users"][index]["tasks"]
        )

        removed = lazy.call(input_, [{"name": "Jane"}, {"name": "Joe"}])

        assert sorted(t["title"] for t in removed) == ["Task Three", "Task Two"]
        match_array(rom.relation("tasks"), [{"title": "Task One", "user": "Jane", "priority": 1}])


class TestLazyComposition:
    def test_rshift_builds_a_composite(self, rom: Container) -> None:
        lazy = rom.command("users").create.with_input(lambda input_: input_["user"])

        assert isinstance(lazy >> rom.command("tasks").create, Composite)

    def test_combine_builds_a_graph(self, rom: Container) -> None:
        lazy = rom.command("users").create.with_input(lambda input_: input_["user"])
        node = rom.command("tasks").create.with_input(lambda input_: input_["user"]["tasks"])

        graph = lazy.combine(node)

        assert isinstance(graph, Graph)
        assert graph.is_lazy

    def test_forwards_views_and_rewraps_commands(self, rom: Container) -> None:
        lazy = rom.command("users").update.with_input(lambda input_: input_["user"])

        restricted = lazy.by_name("Joe")

        assert isinstance(restricted, Lazy)
        assert restricted.evaluator is lazy.evaluator
        restricted.call({"user": {"email": "joseph@doe.org"}})
        assert rom.relation("users").by_name("Joe").one() == {
            "name": "Joe",
            "email": "joseph@doe.org",
        }

    def test_forwards_plain_attributes(self, rom: Container) -> None:
        lazy = rom.command("users").update.with_input(lambda input_: input_["user"])

        assert lazy.result == "one"
        assert lazy.is_one

    def test_unknown_attribute(self, rom: Container) -> None:
        lazy = rom.command("users").update.with_input(lambda input_: input_["user"])

        with pytest.raises(AttributeError):
            lazy.not_here  # noqa: B018


class TestResolvePath:
    def test_plain_keys(self) -> None:
        assert resolve_path({"user": {"name": "Jane"}}, "user.name") == "Jane"

    def test_list_takes_the_current_item(self) -> None:
        input_ = {"user": {"tasks": [{"title": "A"}, {"title": "B"}]}}

        assert resolve_path(input_, "user.tasks.title", item={"title": "B"}) == "B"

    def test_index_before_item(self) -> None:
        input_ = {"users": [{"name": "Jane", "tasks": []}, {"name": "Joe", "tasks": []}]}

        assert resolve_path(input_, "users.name", index=1) == "Joe"
        assert resolve_path(input_, "users.tasks.title", item={"title": "X"}, index=0) == "X"

    def test_missing_key(self) -> None:
        with pytest.raises(CommandFailure, match="nope"):
            resolve_path({"user": {}}, "user.nope")

    def test_index_past_the_collection(self) -> None:
        input_ = {"users": [{"name": "Jane"}]}

        with pytest.raises(CommandFailure, match="list index out of range") as exc_info:
            resolve_path(input_, "users.name", index=3)

        assert isinstance(exc_info.value.original_error, IndexError)
        assert exc_info.value.command == "users.name"
