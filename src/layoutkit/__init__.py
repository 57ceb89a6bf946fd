"""Public package API for layoutkit."""

from layoutkit.api import configure
from layoutkit.api import register_provider
from layoutkit.errors import ApplyError
from layoutkit.errors import InvalidDeferredError
from layoutkit.errors import LayoutError
from layoutkit.errors import NoContextError
from layoutkit.errors import UndefinedMethodError
from layoutkit.meta import meta_for
from layoutkit.naming import CAMEL_CASE
from layoutkit.naming import SNAKE_CASE
from layoutkit.naming import NamingConvention
from layoutkit.registry import CapabilityRegistry
from layoutkit.runtime import Layout
from layoutkit.runtime import Parent

__all__: list[str] = [
    "configure",
    "register_provider",
    "ApplyError",
    "InvalidDeferredError",
    "LayoutError",
    "NoContextError",
    "UndefinedMethodError",
    "meta_for",
    "CAMEL_CASE",
    "SNAKE_CASE",
    "NamingConvention",
    "CapabilityRegistry",
    "Layout",
    "Parent",
]
