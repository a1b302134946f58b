"""Command layer: create, update and delete commands and their composition.

Commands compose with ``>>`` (pipelines), ``combine`` (graphs) and
``with_input`` (lazy input evaluation).  :func:`rommap.commands.builder.build`
turns nested option structures into graphs of lazy commands.
"""

from rommap.commands.abstract import MANY, ONE, AbstractCommand
from rommap.commands.composite import Composite
from rommap.commands.create import Create
from rommap.commands.delete import Delete
from rommap.commands.evaluator import InputEvaluator
from rommap.commands.graph import Graph
from rommap.commands.lazy import Lazy
from rommap.commands.registry import CommandRegistries, CommandRegistry
from rommap.commands.result import Failure, Success
from rommap.commands.update import Update

COMMAND_TYPES: dict[str, type[AbstractCommand]] = {
    "create": Create,
    "update": Update,
    "delete": Delete,
}

__all__ = [
    "COMMAND_TYPES",
    "MANY",
    "ONE",
    "AbstractCommand",
    "CommandRegistries",
    "CommandRegistry",
    "Composite",
    "Create",
    "Delete",
    "Failure",
    "Graph",
    "InputEvaluator",
    "Lazy",
    "Success",
    "Update",
]
