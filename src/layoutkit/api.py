"""User-facing API entrypoints for layoutkit."""

from collections.abc import Callable

from layoutkit.builder import DEFAULT_REGISTRY
from layoutkit.builder import CapabilityRegistry
from layoutkit.builder import Layout


def configure(
    target: object,
    block: Callable[[Layout], object],
    layout_class: type[Layout] = Layout,
    **options: object,
) -> object:
    """Configure ``target`` in one top-level session.

    ``block`` receives the root layout; every undeclared call on it applies to
    the current target. Deferred blocks run before this function returns.

    :param target: Object to configure. Keep your own reference to it.
    :param block: Callable receiving the layout.
    :param layout_class: Layout class to instantiate.
    :param options: Extra keyword arguments for the layout constructor.
    :returns: The configured target.
    """
    layout: Layout = layout_class(root=target, **options)
    return layout.build(lambda: block(layout))


def register_provider(
    target_type: type[object],
    provider_class: type[Layout],
    registry: CapabilityRegistry | None = None,
) -> None:
    """Register a capability provider class for ``target_type``.

    :param target_type: Target class handled by the provider.
    :param provider_class: ``Layout`` subclass offering named operations.
    :param registry: Registry to use; defaults to the process-wide registry.
    """
    selected: CapabilityRegistry = DEFAULT_REGISTRY if registry is None else registry
    selected.register(target_type, provider_class)
