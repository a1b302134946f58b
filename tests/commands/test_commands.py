"""Tests for create, update and delete commands and their registries."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel

from rommap.commands import Create, Failure, Success, Update
from rommap.environment import Container, Setup
from rommap.errors import (
    CommandError,
    InvalidOptionsError,
    TupleCountMismatchError,
    UnknownCommandError,
    UnknownMapperError,
    UnknownRelationError,
    ValidationError,
)
from tests.conftest import match_array


class UserInput(BaseModel):
    name: str
    age: int = 18


def _reject_minors(tuple_: dict[str, Any]) -> None:
    if tuple_["age"] < 18:
        msg = "users must be adults"
        raise ValueError(msg)


@pytest.fixture
def rom(rom_setup: Setup) -> Container:
    rom_setup.relation("users")
    rom_setup.commands("users").define("create", result="one")
    rom_setup.commands("users").define("create_many", type="create")
    rom_setup.commands("users").define(
        "register", type="create", result="one", input=UserInput, validator=_reject_minors
    )
    rom_setup.commands("users").define("update")
    rom_setup.commands("users").define("rename", type="update", result="one")
    rom_setup.commands("users").define("delete")
    return rom_setup.finalize()


class TestCreate:
    def test_single_tuple(self, rom: Container) -> None:
        result = rom.command("users").create.call({"name": "Jane"})

        assert result == {"name": "Jane"}
        match_array(rom.relation("users"), [{"name": "Jane"}])

    def test_many_tuples(self, rom: Container) -> None:
        result = rom.command("users").create_many.call([{"name": "Jane"}, {"name": "Joe"}])

        assert result == [{"name": "Jane"}, {"name": "Joe"}]

    def test_singular_command_rejects_many_tuples(self, rom: Container) -> None:
        with pytest.raises(TupleCountMismatchError, match="expected one"):
            rom.command("users").create.call([{"name": "Jane"}, {"name": "Joe"}])

    def test_input_model_fills_defaults(self, rom: Container) -> None:
        result = rom.command("users").register.call({"name": "Jane"})

        assert result == {"name": "Jane", "age": 18}

    def test_input_model_rejects_bad_input(self, rom: Container) -> None:
        with pytest.raises(ValidationError) as exc_info:
            rom.command("users").register.call({"age": "old"})

        assert exc_info.value.errors
        assert rom.relation("users").count() == 0

    def test_validator_rejects_input(self, rom: Container) -> None:
        with pytest.raises(ValidationError, match="adults"):
            rom.command("users").register.call({"name": "Jane", "age": 12})

    def test_curry_prepends_arguments(self, rom: Container) -> None:
        curried = rom.command("users").create.curry({"name": "Jane"})

        assert curried.call() == {"name": "Jane"}
        assert curried.curry_args == ({"name": "Jane"},)

    def test_subclass_execute_receives_parents(self, rom_setup: Setup) -> None:
        rom_setup.relation("tasks")

        @rom_setup.register_command
        class CreateTasks(Create):
            relation = "tasks"

            def execute(self, tuples: list[dict[str, Any]], user: dict[str, Any]) -> Any:
                return super().execute([{**t, "user": user["name"]} for t in tuples])

        rom = rom_setup.finalize()
        rom.command("tasks").create.call([{"title": "A"}], {"name": "Jane"})

        match_array(rom.relation("tasks"), [{"title": "A", "user": "Jane"}])


class TestUpdate:
    def test_updates_restricted_tuples(self, rom: Container) -> None:
        rom.command("users").create_many.call([{"name": "Jane"}, {"name": "Joe"}])

        command = rom.command("users").rename.restrict(name="Joe")
        result = command.call({"name": "Joseph"})

        assert result == {"name": "Joseph"}
        match_array(rom.relation("users"), [{"name": "Jane"}, {"name": "Joseph"}])

    def test_unrestricted_update_touches_every_tuple(self, rom: Container) -> None:
        rom.command("users").create_many.call([{"name": "Jane"}, {"name": "Joe"}])

        result = rom.command("users").update.call({"active": True})

        assert len(result) == 2
        assert all(t["active"] for t in rom.relation("users"))

    def test_rejects_a_list_of_attributes(self, rom: Container) -> None:
        with pytest.raises(CommandError, match="one mapping"):
            rom.command("users").update.call([{"name": "Jane"}])

    def test_singular_update_of_nothing_returns_none(self, rom: Container) -> None:
        assert rom.command("users").rename.restrict(name="Nobody").call({"name": "X"}) is None


class TestDelete:
    def test_deletes_restricted_tuples(self, rom: Container) -> None:
        rom.command("users").create_many.call([{"name": "Jane"}, {"name": "Joe"}])

        removed = rom.command("users").delete.restrict(name="Jane").call()

        assert removed == [{"name": "Jane"}]
        match_array(rom.relation("users"), [{"name": "Joe"}])


class TestAssociates:
    def test_merges_parent_attributes(self, rom_setup: Setup) -> None:
        rom_setup.relation("tasks")
        rom_setup.commands("tasks").define("create", associates={"user": "name"})
        rom = rom_setup.finalize()

        result = rom.command("tasks").create.call([{"title": "A"}], {"name": "Jane", "id": 1})

        assert result == [{"title": "A", "user": "Jane"}]

    def test_parent_must_be_a_tuple(self, rom_setup: Setup) -> None:
        rom_setup.relation("tasks")
        rom_setup.commands("tasks").define("create", associates={"user": "name"})
        rom = rom_setup.finalize()

        with pytest.raises(CommandError, match="parent tuple"):
            rom.command("tasks").create.call([{"title": "A"}], "Jane")


class TestRegistry:
    def test_item_and_attribute_access(self, rom: Container) -> None:
        registry = rom.command("users")

        assert registry["create"] is registry.create
        assert set(registry) == {"create", "create_many", "register", "update", "rename", "delete"}

    def test_unknown_command(self, rom: Container) -> None:
        with pytest.raises(UnknownCommandError, match="archive"):
            rom.command("users")["archive"]
        with pytest.raises(AttributeError):
            rom.command("users").archive  # noqa: B018

    def test_unknown_relation(self, rom: Container) -> None:
        with pytest.raises(UnknownRelationError, match="books"):
            rom.command("books")

    def test_attempt_success(self, rom: Container) -> None:
        registry = rom.command("users")

        result = registry.attempt(registry.create.call, {"name": "Jane"})

        assert isinstance(result, Success)
        assert result.ok
        assert result.unwrap() == {"name": "Jane"}

    def test_attempt_failure(self, rom: Container) -> None:
        registry = rom.command("users")

        result = registry.attempt(registry.create.call, [{"name": "A"}, {"name": "B"}])

        assert isinstance(result, Failure)
        assert not result.ok
        assert isinstance(result.error, TupleCountMismatchError)
        with pytest.raises(TupleCountMismatchError):
            result.unwrap()

    def test_attempt_does_not_swallow_other_errors(self, rom: Container) -> None:
        def broken() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            rom.command("users").attempt(broken)


class TestDefinitions:
    def test_unknown_command_type(self, rom_setup: Setup) -> None:
        rom_setup.relation("users")

        with pytest.raises(InvalidOptionsError, match="archive"):
            rom_setup.commands("users").define("archive")

    def test_command_for_unknown_relation(self, rom_setup: Setup) -> None:
        rom_setup.commands("books").define("create")

        with pytest.raises(UnknownRelationError, match="books"):
            rom_setup.finalize()

    def test_defined_class_names(self, rom_setup: Setup) -> None:
        command_cls = rom_setup.commands("users").define("rename", type="update")

        assert command_cls.__name__ == "UsersRename"
        assert issubclass(command_cls, Update)
        assert command_cls.registry_name() == "rename"

    def test_invalid_result_override(self, rom: Container) -> None:
        command = rom.command("users").create

        with pytest.raises(ValueError, match="result"):
            type(command)(command.relation, result="some")


class TestComposite:
    def test_pipes_result_into_the_next_command(self, rom_setup: Setup) -> None:
        rom_setup.relation("users")
        rom_setup.relation("audit")
        rom_setup.commands("users").define("create", result="one")

        @rom_setup.register_command
        class LogCreate(Create):
            relation = "audit"
            result = "one"

            def execute(self, user: dict[str, Any]) -> Any:
                return super().execute({"event": "created", "user": user["name"]})

        rom = rom_setup.finalize()
        pipeline = rom.command("users").create >> rom.command("audit").create

        result = pipeline.call({"name": "Jane"})

        assert result == {"event": "created", "user": "Jane"}
        assert pipeline.is_one

    def test_pipes_into_a_callable(self, rom: Container) -> None:
        pipeline = rom.command("users").create >> (lambda user: user["name"].upper())

        assert pipeline.call({"name": "Jane"}) == "JANE"

    def test_empty_result_short_circuits(self, rom: Container) -> None:
        calls: list[Any] = []
        pipeline = rom.command("users").delete >> calls.append

        assert pipeline.call() == []
        assert calls == []

    def test_map_with_needs_registered_mappers(self, rom: Container) -> None:
        with pytest.raises(UnknownMapperError, match="entity"):
            rom.command("users").create.map_with("entity")


class TestForwarding:
    def test_view_returns_a_rebound_command(self, rom: Container) -> None:
        command = rom.command("users").delete

        restricted = command.restrict(name="Jane")

        assert type(restricted) is type(command)
        assert restricted is not command
        assert restricted.relation is not command.relation

    def test_missing_attribute(self, rom: Container) -> None:
        with pytest.raises(AttributeError, match="by_email"):
            rom.command("users").create.by_email  # noqa: B018
