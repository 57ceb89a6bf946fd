"""Capability-provider registry keyed by root layout and target type."""

import logging
import threading
import weakref
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from layoutkit.runtime import Layout

logger: logging.Logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Map target types to provider classes and cache provider instances per root.

    Provider classes are ``Layout`` subclasses. One instance is created lazily
    for every ``(root layout, target type)`` pair and reused afterwards; the
    cache only grows and entries disappear together with their root layout.
    """

    _lock: threading.RLock
    _provider_classes: dict[type[object], "type[Layout]"]
    _providers_by_root: "weakref.WeakKeyDictionary[Layout, dict[type[object], Layout | None]]"

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._lock = threading.RLock()
        self._provider_classes = {}
        self._providers_by_root = weakref.WeakKeyDictionary()

    def register(self, target_type: type[object], provider_class: "type[Layout]") -> None:
        """Register ``provider_class`` as the provider for ``target_type``.

        :param target_type: Target class handled by the provider.
        :param provider_class: ``Layout`` subclass offering named operations.
        :raises TypeError: If either argument is not a class.
        """
        if isinstance(target_type, type) is False:
            raise TypeError("target_type must be a class")
        if isinstance(provider_class, type) is False:
            raise TypeError("provider_class must be a class")

        with self._lock:
            self._provider_classes[target_type] = provider_class
            # Types resolved before this registration may now match differently.
            for cached in self._providers_by_root.values():
                stale: list[type[object]] = [
                    cached_type
                    for cached_type, provider in cached.items()
                    if provider is None and issubclass(cached_type, target_type)
                ]
                for cached_type in stale:
                    cached.pop(cached_type, None)
        logger.debug("registered provider %s for %s", provider_class.__name__, target_type.__name__)

    def provider_class_for(self, target_type: type[object]) -> "type[Layout] | None":
        """Find the provider class for ``target_type``.

        The target's MRO is walked and the nearest registered class wins.

        :param target_type: Target class.
        :returns: Provider class or ``None`` when nothing is registered.
        """
        with self._lock:
            for candidate in target_type.__mro__:
                provider_class: "type[Layout] | None" = self._provider_classes.get(candidate)
                if provider_class is not None:
                    return provider_class
        return None

    def provider_for(self, root: "Layout", target_type: type[object]) -> "Layout | None":
        """Return the cached provider for ``(root, target_type)``, creating it on first use.

        :param root: Root layout whose identity scopes the cache.
        :param target_type: Target class.
        :returns: Provider instance, or ``None`` when no provider class matches.
        """
        with self._lock:
            cached: dict[type[object], Layout | None] | None = self._providers_by_root.get(root)
            if cached is None:
                cached = {}
                self._providers_by_root[root] = cached

            is_cached: bool = target_type in cached
            if is_cached is True:
                return cached[target_type]

            provider_class: "type[Layout] | None" = self.provider_class_for(target_type)
            provider: Layout | None = None
            if provider_class is not None:
                provider = provider_class(layout=root)
                logger.debug(
                    "created provider %s for %s under %r",
                    provider_class.__name__,
                    target_type.__name__,
                    root,
                )
            cached[target_type] = provider
            return provider

    def clear(self) -> None:
        """Drop all registrations and cached providers."""
        with self._lock:
            self._provider_classes.clear()
            self._providers_by_root = weakref.WeakKeyDictionary()


DEFAULT_REGISTRY: CapabilityRegistry = CapabilityRegistry()
