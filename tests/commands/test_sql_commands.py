"""Commands, lazy commands and graphs running against the SQL gateway."""

from __future__ import annotations

from collections.abc import Generator

import pytest

import rommap
from rommap.environment import Container
from tests.conftest import match_array


@pytest.fixture
def rom(sqlite_uri: str) -> Generator[Container]:
    rom_setup = rommap.setup(sqlite_uri)
    rom_setup.relation("users", primary_key=("id",))
    rom_setup.relation("tasks", primary_key=("id",))
    rom_setup.commands("users").define("create", result="one")
    rom_setup.commands("tasks").define("create", associates={"user": "name"})
    rom_setup.commands("tasks").define("update")
    rom_setup.commands("tasks").define("delete")
    with rom_setup.finalize() as container:
        yield container


class TestSqlCommands:
    def test_create_returns_the_generated_key(self, rom: Container) -> None:
        user = rom.command("users").create.call({"name": "Jane", "email": "jane@doe.org"})

        assert user == {"id": 1, "name": "Jane", "email": "jane@doe.org"}

    def test_associates_fill_the_foreign_key(self, rom: Container) -> None:
        jane = rom.command("users").create.call({"name": "Jane"})

        tasks = rom.command("tasks").create.call([{"title": "Write"}, {"title": "Review"}], jane)

        assert [t["user"] for t in tasks] == ["Jane", "Jane"]
        assert [t["id"] for t in tasks] == [1, 2]


class TestSqlLazy:
    def test_primary_key_restricts_the_update(self, rom: Container) -> None:
        jane = rom.command("users").create.call({"name": "Jane"})
        _, second = rom.command("tasks").create.call(
            [{"title": "Write", "priority": 1}, {"title": "Review", "priority": 1}], jane
        )
        lazy = rom.command("tasks").update.with_input(lambda input_: input_["tasks"])

        lazy.call({"tasks": [{"id": second["id"], "priority": 5}]})

        match_array(
            rom.relation("tasks").project("title", "priority"),
            [{"title": "Write", "priority": 1}, {"title": "Review", "priority": 5}],
        )

    def test_deletes_per_parent_by_primary_key(self, rom: Container) -> None:
        jane = rom.command("users").create.call({"name": "Jane"})
        joe = rom.command("users").create.call({"name": "Joe"})
        write, _ = rom.command("tasks").create.call([{"title": "Write"}, {"title": "Plan"}], jane)
        [review] = rom.command("tasks").create.call([{"title": "Review"}], joe)
        input_ = {"users": [{"tasks": [{"id": write["id"]}]}, {"tasks": [{"id": review["id"]}]}]}
        lazy = rom.command("tasks").delete.with_input(
            lambda input_, index: input_["users"][index]["tasks"]
        )

        removed = lazy.call(input_, [jane, joe])

        assert sorted(t["title"] for t in removed) == ["Review", "Write"]
        assert [t["title"] for t in rom.relation("tasks")] == ["Plan"]


class TestSqlGraph:
    def test_nested_create(self, rom: Container) -> None:
        command = rom.command([{"user": "users"}, ["create", ["tasks", ["create"]]]])

        left, [tasks] = command.call(
            {
                "user": {
                    "name": "Jane",
                    "email": "jane@doe.org",
                    "tasks": [{"title": "Write"}, {"title": "Review", "priority": 2}],
                }
            }
        )

        assert left == [{"id": 1, "name": "Jane", "email": "jane@doe.org"}]
        assert [t["user"] for t in tasks] == ["Jane", "Jane"]
        match_array(
            rom.relation("tasks").project("title", "user", "priority"),
            [
                {"title": "Write", "user": "Jane", "priority": None},
                {"title": "Review", "user": "Jane", "priority": 2},
            ],
        )
