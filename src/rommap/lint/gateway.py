"""Lints for Gateway subclasses."""

from __future__ import annotations

from rommap.adapters import get_adapter
from rommap.adapters.base import Dataset, Gateway
from rommap.errors import AdapterNotFoundError
from rommap.lint.linter import Linter


class GatewayLinter(Linter):
    """Check that *gateway_cls* sets up from *uri* and serves datasets.

    *identifier* is the URI scheme the gateway is registered under.
    """

    def __init__(self, identifier: str, gateway_cls: type[Gateway], uri: str) -> None:
        self.identifier = identifier
        self.gateway_cls = gateway_cls
        self.uri = uri
        self._gateway: Gateway | None = None

    @property
    def subject(self) -> str:
        return self.gateway_cls.__name__

    @property
    def gateway(self) -> Gateway:
        if self._gateway is None:
            self._gateway = self.gateway_cls.setup(self.uri)
        return self._gateway

    def close(self) -> None:
        if self._gateway is not None:
            self._gateway.disconnect()
            self._gateway = None

    def lint_gateway_setup(self) -> None:
        if not isinstance(self.gateway, self.gateway_cls):
            self.complain(f"setup({self.uri!r}) must return a {self.gateway_cls.__name__} instance")

    def lint_adapter_registered(self) -> None:
        try:
            registered = get_adapter(self.identifier)
        except AdapterNotFoundError:
            registered = None
        if registered is not self.gateway_cls:
            self.complain(f"must be registered for the {self.identifier!r} scheme")

    def lint_dataset_presence(self) -> None:
        result = self.gateway.has_dataset("rommap_lint_missing")
        if not isinstance(result, bool):
            self.complain("has_dataset(name) must return a bool")

    def lint_dataset_reader(self) -> None:
        names = self.gateway.dataset_names()
        if not names:
            return
        if not isinstance(self.gateway.dataset(names[0]), Dataset):
            self.complain("dataset(name) must return a Dataset")

    def lint_dataset_listing(self) -> None:
        names = self.gateway.dataset_names()
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            self.complain("dataset_names() must return a list of strings")

    def lint_disconnect(self) -> None:
        gateway = self.gateway_cls.setup(self.uri)
        gateway.disconnect()
        gateway.disconnect()
