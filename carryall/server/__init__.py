"""Server half of the bridge: trust policy, dispatch, projection and deferred code."""

from carryall.server.deferred import DeferredCode
from carryall.server.dispatcher import Dispatcher
from carryall.server.projection import project
from carryall.server.registry import CallableRegistry, bridge_exposed

__all__ = [
    "CallableRegistry",
    "DeferredCode",
    "Dispatcher",
    "bridge_exposed",
    "project",
]
