"""Layout builder routines."""

from layoutkit.registry import DEFAULT_REGISTRY
from layoutkit.registry import CapabilityRegistry
from layoutkit.runtime import Layout

__all__: list[str] = [
    "DEFAULT_REGISTRY",
    "CapabilityRegistry",
    "Layout",
]
