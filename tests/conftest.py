"""Pytest hooks and fixtures."""

import os

import pytest

from carryall.client.builder import set_default_dispatcher
from carryall.config.access import clear_config_cache
from carryall.config.schema import ClientConfig, Config
from carryall.server.deferred import DeferredCode
from carryall.server.dispatcher import Dispatcher
from carryall.server.registry import CallableRegistry, bridge_exposed


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "network: opens a real socket (skipped in CI)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip network tests when running in CI."""
    if os.environ.get("CI") != "true":
        return
    skip = pytest.mark.skip(reason="Opens a real socket (skipped in CI)")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip)


class Item:
    def __init__(self, name, quantity, price):
        self.name = name
        self.quantity = quantity
        self.price = price
        self._cost = price / 2

    def getTotal(self):
        return self.quantity * self.price

    def getLabel(self, prefix=""):
        return f"{prefix}{self.name}"


class Inventory:
    """Bridge type used across dispatcher and end-to-end tests."""

    calls = []

    @staticmethod
    @bridge_exposed
    def items():
        return [Item("bolt", 3, 2), Item("nut", 10, 1)]

    @staticmethod
    @bridge_exposed
    def record(*params):
        Inventory.calls.append(params)
        return {"received": list(params)}

    @staticmethod
    @bridge_exposed
    def refresh():
        return DeferredCode().read_property("answer").assign(42)

    @staticmethod
    @bridge_exposed
    async def count():
        return 2

    @staticmethod
    @bridge_exposed
    def explode():
        raise RuntimeError("stock ledger locked, token=abc123")

    @staticmethod
    def purge():
        Inventory.calls.append("purge")
        return True


@pytest.fixture(autouse=True)
def _isolate_process_state(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    clear_config_cache()
    set_default_dispatcher(None)
    Inventory.calls.clear()
    yield
    clear_config_cache()
    set_default_dispatcher(None)


@pytest.fixture
def registry():
    return CallableRegistry().register(Inventory)


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry)


@pytest.fixture
def config():
    return Config(client=ClientConfig(dispatcher_url="http://testserver/"))


@pytest.fixture
def inventory():
    return Inventory
