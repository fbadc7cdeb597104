"""carryall - call server-side Python callables from a client over one HTTP exchange."""

__version__ = "0.1.0"
__logo__ = "🧳"
