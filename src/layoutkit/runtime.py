"""Layout sessions: context stack, deferred queue and dynamic dispatch."""

import inspect
import logging
import weakref
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from types import FunctionType
from typing import ClassVar
from typing import Literal

from layoutkit.errors import ApplyError
from layoutkit.errors import InvalidDeferredError
from layoutkit.errors import NoContextError
from layoutkit.errors import UndefinedMethodError
from layoutkit.meta import clear_meta
from layoutkit.meta import meta_for
from layoutkit.naming import CAMEL_CASE
from layoutkit.naming import WORD_SEPARATOR
from layoutkit.naming import NamingConvention
from layoutkit.naming import resolve_convention
from layoutkit.registry import DEFAULT_REGISTRY
from layoutkit.registry import CapabilityRegistry

logger: logging.Logger = logging.getLogger(__name__)

Block = Callable[[], object]
LayoutState = Literal["initial", "active"]
BLOCK_KWARG: str = "_block"
_MISSING: object = object()


def _long_form(
    method_name: str,
    args: list[object],
    kwargs: dict[str, object],
) -> tuple[str, list[object]] | None:
    """Fold keyword-style arguments into a combined selector.

    ``foo(v, a=1, b=2)`` and ``foo(v, {"a": 1, "b": 2})`` both fold into
    ``("foo:a:b:", [v, 1, 2])``.

    :param method_name: Base method name.
    :param args: Positional arguments.
    :param kwargs: Keyword arguments.
    :returns: Tuple of ``(long_name, long_args)`` or ``None`` when the call does not fold.
    """
    mapping: Mapping[object, object] | None = None
    if len(kwargs) > 0:
        if len(args) == 1:
            mapping = kwargs
    elif len(args) == 2 and isinstance(args[1], Mapping) is True:
        mapping = args[1]

    if mapping is None or len(mapping) == 0:
        return None

    keys: str = ":".join(str(key) for key in mapping.keys())
    long_name: str = f"{method_name}:{keys}:"
    long_args: list[object] = [args[0]]
    long_args.extend(mapping.values())
    return long_name, long_args


def _has_attribute(target: object, attr_name: str) -> bool:
    """Report whether ``target`` exposes ``attr_name`` at all.

    The lookup is static: names served only by a ``__getattr__`` fallback are
    not reported.

    :param target: Configuration target.
    :param attr_name: Attribute name.
    :returns: ``True`` when the attribute is defined.
    """
    return inspect.getattr_static(target, attr_name, _MISSING) is not _MISSING


def _has_method(target: object, attr_name: str) -> bool:
    """Report whether ``target`` exposes ``attr_name`` as a callable.

    :param target: Configuration target.
    :param attr_name: Attribute name.
    :returns: ``True`` when the attribute is defined and resolves to a callable.
    """
    if _has_attribute(target, attr_name) is False:
        return False
    return callable(getattr(target, attr_name, None))


def _can_assign(target: object, attr_name: str) -> bool:
    """Report whether ``target.attr_name = value`` is an accessor assignment.

    Properties count only with a setter. Slots and other data descriptors
    count, as does anything stored in the instance ``__dict__``, callables
    included. Functions, static methods and class methods on the class are
    methods; other class attributes count when they are not callable.

    :param target: Configuration target.
    :param attr_name: Attribute name.
    :returns: ``True`` when assignment is supported.
    """
    class_value: object = inspect.getattr_static(type(target), attr_name, _MISSING)
    if isinstance(class_value, property) is True:
        return class_value.fset is not None
    if class_value is not _MISSING and hasattr(type(class_value), "__set__") is True:
        return True

    try:
        instance_dict: object = object.__getattribute__(target, "__dict__")
    except AttributeError:
        instance_dict = None
    if isinstance(instance_dict, dict) is True and attr_name in instance_dict:
        return True

    if class_value is _MISSING:
        return False
    if isinstance(class_value, (FunctionType, staticmethod, classmethod)) is True:
        return False
    return callable(class_value) is False


def _invoke(target: object, attr_name: str, args: Sequence[object], kwargs: Mapping[str, object]) -> object:
    """Call ``target.attr_name`` or read it when it is a plain attribute.

    :param target: Configuration target.
    :param attr_name: Attribute name.
    :param args: Positional arguments.
    :param kwargs: Keyword arguments.
    :returns: Call result or attribute value.
    :raises TypeError: If arguments are given for a non-callable attribute.
    """
    value: object = getattr(target, attr_name)
    if callable(value) is True:
        return value(*args, **kwargs)
    if len(args) > 0 or len(kwargs) > 0:
        raise TypeError(f"{type(target).__name__}.{attr_name} is not callable")
    return value


def _provider_offers(provider: "Layout", method_name: str) -> bool:
    """Report whether a capability provider defines ``method_name``.

    Only real class or instance attributes count; the provider's own dynamic
    fallback is ignored.

    :param provider: Capability provider.
    :param method_name: Method name.
    :returns: ``True`` when the provider offers a callable under that name.
    """
    if method_name.startswith("_") is True:
        return False
    static_value: object = inspect.getattr_static(provider, method_name, _MISSING)
    if static_value is _MISSING:
        return False
    if isinstance(static_value, property) is True:
        return False
    return callable(getattr(provider, method_name)) is True


def _call_provider(
    provider: "Layout",
    method_name: str,
    args: Sequence[object],
    kwargs: Mapping[str, object],
    block: Block | None,
) -> object:
    """Invoke one provider method, passing the block as ``_block=`` when present.

    :param provider: Capability provider.
    :param method_name: Method name.
    :param args: Positional arguments.
    :param kwargs: Keyword arguments.
    :param block: Optional block.
    :returns: Provider result.
    """
    method: Callable[..., object] = getattr(provider, method_name)
    call_kwargs: dict[str, object] = dict(kwargs)
    if block is not None:
        call_kwargs[BLOCK_KWARG] = block
    return method(*args, **call_kwargs)


def _validate_hook(value: object, name: str) -> None:
    """Ensure an optional hook argument is callable.

    :param value: Candidate hook.
    :param name: Argument name used in the error message.
    :raises TypeError: If ``value`` is neither ``None`` nor callable.
    """
    if value is None:
        return
    if callable(value) is False:
        raise TypeError(f"{name} must be callable")


def _normalize_deferred_application_types(
    types_value: Sequence[type[object]],
) -> tuple[type[object], ...]:
    """Validate the deferred-application type list.

    :param types_value: Sequence of classes.
    :returns: Tuple of classes.
    :raises TypeError: If an entry is not a class.
    """
    normalized: list[type[object]] = []
    for candidate in types_value:
        if isinstance(candidate, type) is False:
            raise TypeError("deferred_application_types entries must be classes")
        normalized.append(candidate)
    return tuple(normalized)


class Parent:
    """Read-only record of the target that was current before a context switch."""

    __slots__ = ("_element",)

    _element: object

    def __init__(self, element: object) -> None:
        """Wrap the enclosing target.

        :param element: Previous target, or ``None`` at the top level.
        """
        object.__setattr__(self, "_element", element)

    @property
    def element(self) -> object:
        """Return the enclosing target.

        :returns: Previous target or ``None``.
        """
        return self._element

    def __setattr__(self, attr_name: str, value: object) -> None:
        raise AttributeError("Parent links are immutable")

    def __repr__(self) -> str:
        return f"Parent({self._element!r})"


class _ContextFrame:
    """Snapshot of the mutable context fields of a root layout."""

    __slots__ = ("context", "parent", "delegate", "is_top_level")

    context: object
    parent: Parent | None
    delegate: "Layout | None"
    is_top_level: bool | None

    def __init__(
        self,
        context: object,
        parent: Parent | None,
        delegate: "Layout | None",
        is_top_level: bool | None,
    ) -> None:
        self.context = context
        self.parent = parent
        self.delegate = delegate
        self.is_top_level = is_top_level


class _DynamicCall:
    """Call wrapper returned for undeclared layout attributes."""

    _layout: "Layout"
    _method_name: str

    def __init__(self, layout: "Layout", method_name: str) -> None:
        """Initialize a dynamic call wrapper.

        :param layout: Layout that received the attribute lookup.
        :param method_name: Undeclared method name.
        """
        self._layout = layout
        self._method_name = method_name

    def __call__(self, *args: object, **kwargs: object) -> object:
        """Forward the call to ``Layout.apply``.

        :param args: Positional arguments.
        :param kwargs: Keyword arguments; ``_block`` is extracted as the block.
        :returns: Result of the resolved operation.
        """
        block: object = kwargs.pop(BLOCK_KWARG, None)
        if block is not None and callable(block) is False:
            raise TypeError(f"{BLOCK_KWARG} must be callable")
        return self._layout.apply(self._method_name, list(args), kwargs, block=block)

    def __repr__(self) -> str:
        return f"<dynamic layout method {self._method_name!r}>"


class Layout:
    """Builder session that applies undeclared calls to the current target.

    Only the root layout of a hierarchy owns context state and the deferred
    queue. Child layouts (capability providers) hold a weak reference to the
    root and forward every context and deferred mutation to it.

    Undeclared attributes resolve to call wrappers, so ``layout.corner_radius(5)``
    becomes ``layout.apply("corner_radius", [5])``. Pass ``_block=`` to switch
    context to the result of the call while the block runs.
    """

    naming: ClassVar[NamingConvention] = CAMEL_CASE
    registry: ClassVar[CapabilityRegistry] = DEFAULT_REGISTRY
    deferred_application_types: ClassVar[tuple[type[object], ...]] = ()
    delegated_methods: ClassVar[tuple[str, ...]] = ()

    _layout_ref: "weakref.ReferenceType[Layout] | None"
    _context: object
    _parent: Parent | None
    _layout_delegate: "Layout | None"
    _layout_state: LayoutState
    _is_top_level: bool | None
    _deferred_blocks: list[tuple[object, Block]] | None
    _preset_root: Callable[[], object] | None
    _assigned_root: object
    _root_factory: Callable[[], object] | None
    _element_lookup: Callable[[object, str], object] | None
    _registry: CapabilityRegistry
    _naming: NamingConvention
    _deferred_application_types: tuple[type[object], ...]

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Install guarded wrappers for names listed in ``delegated_methods``."""
        super().__init_subclass__(**kwargs)
        own_names: object = cls.__dict__.get("delegated_methods", ())
        for method_name in own_names:
            cls.delegate_method(method_name)

    def __init__(
        self,
        root: object = None,
        *,
        layout: "Layout | None" = None,
        root_factory: Callable[[], object] | None = None,
        element_lookup: Callable[[object, str], object] | None = None,
        registry: CapabilityRegistry | None = None,
        naming: NamingConvention | str | None = None,
        deferred_application_types: Sequence[type[object]] | None = None,
    ) -> None:
        """Initialize a layout session.

        :param root: Optional preset root target. It is held weakly when it
            supports weak references, so keep your own reference to it.
        :param layout: Root layout to share context with. Omit for a root layout.
        :param root_factory: Hook creating the root target on first use.
        :param element_lookup: Hook ``(root_target, alias) -> element`` used by :meth:`get`.
        :param registry: Capability registry; defaults to the class registry.
        :param naming: Naming convention object or name (``camel``/``snake``).
        :param deferred_application_types: Target classes whose setters are
            called without probing.
        :raises TypeError: If a hook or setting has the wrong type.
        """
        _validate_hook(root_factory, "root_factory")
        _validate_hook(element_lookup, "element_lookup")
        if registry is not None and isinstance(registry, CapabilityRegistry) is False:
            raise TypeError("registry must be a CapabilityRegistry")

        self._layout_ref = None
        self._context = None
        self._parent = None
        self._layout_delegate = None
        self._layout_state = "initial"
        self._is_top_level = None
        self._deferred_blocks = None
        self._assigned_root = None
        self._root_factory = root_factory
        self._element_lookup = element_lookup
        self._registry = type(self).registry if registry is None else registry
        self._naming = type(self).naming if naming is None else resolve_convention(naming)
        if deferred_application_types is None:
            deferred_application_types = type(self).deferred_application_types
        self._deferred_application_types = _normalize_deferred_application_types(deferred_application_types)

        self._preset_root = None
        if root is not None:
            try:
                self._preset_root = weakref.ref(root)
            except TypeError:
                self._preset_root = lambda: root

        self.set_layout(layout)

    def __getattr__(self, attr_name: str) -> object:
        """Resolve undeclared attributes into dynamic calls.

        :param attr_name: Attribute name.
        :returns: Call wrapper forwarding to :meth:`apply`.
        :raises AttributeError: For private and dunder names.
        """
        if attr_name.startswith("_") is True:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {attr_name!r}")
        return _DynamicCall(self, attr_name)

    def __repr__(self) -> str:
        role: str = "root" if self._layout_ref is None else "child"
        return f"<{type(self).__name__} {role} state={self._layout_state}>"

    @classmethod
    def targets(cls, *target_types: type[object]) -> None:
        """Register this layout class as the capability provider for ``target_types``.

        :param target_types: Target classes handled by this layout class.
        """
        for target_type in target_types:
            cls.registry.register(target_type, cls)

    @classmethod
    def delegate_method(cls, method_name: str) -> None:
        """Install a re-entrancy-guarded dynamic method named ``method_name``.

        Use this for names that already exist on the layout class, so that an
        ordinary attribute lookup would never reach :meth:`apply`. The guard
        flag lives in the target's metadata, so a provider that inherits the
        same wrapper goes straight to the target instead of recursing. The
        flag is removed afterwards, and a metadata slot left empty is released.

        :param method_name: Method name to guard.
        :raises ValueError: If ``method_name`` is empty or private.
        """
        if len(method_name) == 0 or method_name.startswith("_") is True:
            raise ValueError("delegated method names must be public and non-empty")
        flag_name: str = f"is_calling_{method_name}"

        def guarded(self: "Layout", *args: object, **kwargs: object) -> object:
            block: Block | None = kwargs.pop(BLOCK_KWARG, None)
            try:
                target: object = self.target
            except NoContextError as exc:
                raise UndefinedMethodError(method_name, self) from exc

            meta: dict[str, object] = meta_for(target)
            if meta.get(flag_name) is True:
                if block is not None:
                    return self.apply_with_context(method_name, list(args), kwargs, block)
                return self.apply_with_target(method_name, list(args), kwargs)

            meta[flag_name] = True
            try:
                return self.apply(method_name, list(args), kwargs, block=block)
            finally:
                meta.pop(flag_name, None)
                if len(meta) == 0:
                    clear_meta(target)

        guarded.__name__ = method_name
        guarded.__qualname__ = f"{cls.__qualname__}.{method_name}"
        guarded.__doc__ = f"Guarded dynamic dispatch of {method_name!r} to the current target."
        setattr(cls, method_name, guarded)

    def set_layout(self, layout: "Layout | None") -> None:
        """Attach this layout to a root layout, or make it a root.

        :param layout: Layout to share context with; ``None`` or ``self`` makes this a root.
        """
        if layout is None or layout is self:
            self._layout_ref = None
            return
        root_layout: Layout = layout._root_layout()
        if root_layout is self:
            self._layout_ref = None
            return
        self._layout_ref = weakref.ref(root_layout)

    def _root_layout(self) -> "Layout":
        """Return the root layout of this hierarchy.

        :returns: Root layout.
        :raises NoContextError: If the root layout has been garbage collected.
        """
        layout_ref: "weakref.ReferenceType[Layout] | None" = self._layout_ref
        if layout_ref is None:
            return self
        root_layout: Layout | None = layout_ref()
        if root_layout is None:
            raise NoContextError("Root layout is no longer alive")
        return root_layout

    @property
    def is_root(self) -> bool:
        """Report whether this layout owns its context.

        :returns: ``True`` for root layouts.
        """
        return self._layout_ref is None

    @property
    def layout_state(self) -> LayoutState:
        """Return the lifecycle state of the root layout.

        :returns: ``initial`` or ``active``.
        """
        return self._root_layout()._layout_state

    @property
    def target(self) -> object:
        """Return the object currently being configured.

        :returns: Current target.
        :raises NoContextError: If no context is active and no root can be created.
        """
        root_layout: Layout = self._root_layout()
        if root_layout is not self:
            return root_layout.target
        if self._context is None:
            self._context = self.create_default_root_context()
        return self._context

    @property
    def v(self) -> object:
        """Short alias of :attr:`target`."""
        return self.target

    @property
    def parent(self) -> Parent | None:
        """Return the parent link of the current context.

        :returns: Parent link, or ``None`` outside of any context.
        """
        return self._root_layout()._parent

    @property
    def root(self) -> object:
        """Return the root target of this hierarchy.

        :returns: Root target.
        :raises NoContextError: If no root target is available.
        """
        return self._root_layout().create_default_root_context()

    @property
    def capability_provider(self) -> "Layout | None":
        """Return the provider bound to the current context.

        :returns: Provider or ``None``.
        """
        return self._root_layout()._layout_delegate

    def create_default_root_context(self) -> object:
        """Return the root target, creating it through ``root_factory`` on first use.

        Override this in subclasses to synthesize a root target.

        :returns: Root target.
        :raises NoContextError: If no root target is preset and none can be created.
        """
        root_layout: Layout = self._root_layout()
        if root_layout is not self:
            return root_layout.create_default_root_context()

        if self._preset_root is not None:
            preset: object = self._preset_root()
            if preset is None:
                raise NoContextError("Preset root target is no longer alive")
            return preset
        if self._assigned_root is not None:
            return self._assigned_root
        if self._root_factory is not None:
            created: object = self._root_factory()
            if created is None:
                raise NoContextError("root_factory did not return a root target")
            self._assigned_root = created
            return created
        raise NoContextError("No root target specified (pass root= or root_factory=)")

    def get(self, alias: str) -> object:
        """Resolve an element alias against the root target.

        :param alias: Element alias.
        :returns: Matching element.
        :raises NoContextError: If no root target is available.
        :raises KeyError: If the alias does not name an element.
        """
        root_layout: Layout = self._root_layout()
        root_target: object = root_layout.root
        lookup: Callable[[object, str], object] | None = root_layout._element_lookup
        element: object
        if lookup is not None:
            element = lookup(root_target, alias)
        else:
            element = getattr(root_target, alias, None)
        if element is None:
            raise KeyError(f"No element named {alias!r}")
        return element

    def layout(self) -> None:
        """Describe the layout; called by :meth:`build` when no block is given."""

    def build(self, block: Block | None = None) -> object:
        """Run one top-level session against the root target.

        :param block: Optional block; defaults to :meth:`layout`.
        :returns: Root target.
        :raises NoContextError: If no root target is available.
        """
        root_layout: Layout = self._root_layout()
        if root_layout is not self:
            return root_layout.build(block)

        self._layout_state = "active"
        root_target: object = self.root
        run_block: Block = self.layout if block is None else block
        self.context(root_target, run_block)
        return root_target

    def context(self, target: object, block: Block | None = None) -> object:
        """Run ``block`` with ``target`` as the current context.

        The previous context is restored when the block returns or raises.
        When this is the outermost context, deferred blocks run afterwards.
        String targets are resolved through :meth:`get`.

        :param target: New context target or element alias.
        :param block: Block to run; without it this is a no-op.
        :returns: The new context target.
        :raises NoContextError: If the target is ``None`` or an alias cannot be resolved.
        """
        if block is None:
            return target
        if isinstance(target, str) is True:
            target = self.get(target)
        return self._enter_context(target, block)

    def _enter_context(self, target: object, block: Block) -> object:
        """Run ``block`` with ``target`` as the current context, taking strings literally.

        :param target: New context target.
        :param block: Block to run.
        :returns: The new context target.
        :raises NoContextError: If the target is ``None``.
        """
        root_layout: Layout = self._root_layout()
        if root_layout is not self:
            return root_layout._enter_context(target, block)

        if target is None:
            raise NoContextError("Cannot enter a context without a target")

        saved: _ContextFrame = _ContextFrame(
            self._context,
            self._parent,
            self._layout_delegate,
            self._is_top_level,
        )
        is_top_level: bool = self._is_top_level is None
        self._is_top_level = is_top_level
        self._parent = Parent(saved.context)
        self._context = target
        self._layout_delegate = self._registry.provider_for(self, type(target))
        if is_top_level is True:
            logger.debug("entering top-level context %r", target)

        try:
            try:
                block()
            finally:
                self._context = saved.context
                self._parent = saved.parent
                self._layout_delegate = saved.delegate
            if is_top_level is True:
                self.run_deferred(target)
        except Exception:
            if is_top_level is True:
                abandoned: list[tuple[object, Block]] = self._deferred_blocks or []
                self._deferred_blocks = None
                logger.debug("abandoning %d deferred block(s) after failure in %r", len(abandoned), target)
            raise
        finally:
            self._is_top_level = saved.is_top_level

        return target

    def deferred(self, block: Block | None = None, context: object = None) -> Block | None:
        """Schedule ``block`` to run after the top-level session completes.

        Usable as a decorator. The block runs with ``context`` (default: the
        current target) as its context.

        :param block: Block to defer.
        :param context: Optional explicit context.
        :returns: The block.
        :raises InvalidDeferredError: If no context can be determined.
        :raises TypeError: If no block is given.
        """
        self._root_layout().add_deferred_block(context, block)
        return block

    def add_deferred_block(self, context: object, block: Block | None) -> "Layout":
        """Append one deferred entry to the root queue.

        :param context: Explicit context, element alias, or ``None`` for the current target.
        :param block: Block to defer.
        :returns: This layout.
        :raises InvalidDeferredError: If no context can be determined.
        :raises TypeError: If no block is given.
        """
        root_layout: Layout = self._root_layout()
        if root_layout is not self:
            root_layout.add_deferred_block(context, block)
            return self

        if isinstance(context, str) is True:
            context = self.get(context)
        elif context is None:
            context = self._context
        if context is None:
            try:
                context = self.create_default_root_context()
            except NoContextError as exc:
                raise InvalidDeferredError("deferred must be run inside of a context") from exc
        if block is None or callable(block) is False:
            raise TypeError("Block required")

        self.deferred_blocks.append((context, block))
        return self

    @property
    def deferred_blocks(self) -> list[tuple[object, Block]]:
        """Return the root queue of deferred entries, allocating it on first use.

        :returns: Mutable list of ``(target, block)`` pairs.
        """
        root_layout: Layout = self._root_layout()
        if root_layout._deferred_blocks is None:
            root_layout._deferred_blocks = []
        return root_layout._deferred_blocks

    def run_deferred(self, top_level_context: object) -> None:
        """Drain the deferred queue until no more work is scheduled.

        Each pass takes the whole queue and runs every entry as a context
        switch. Entries scheduled during a pass run in the next pass.

        :param top_level_context: Target of the top-level session, for diagnostics.
        """
        root_layout: Layout = self._root_layout()
        if root_layout is not self:
            root_layout.run_deferred(top_level_context)
            return

        generation: int = 0
        pending: list[tuple[object, Block]] | None = self._deferred_blocks
        while pending:
            self._deferred_blocks = None
            generation += 1
            logger.debug(
                "running %d deferred block(s) for %r (pass %d)",
                len(pending),
                top_level_context,
                generation,
            )
            for deferred_target, deferred_block in pending:
                self._enter_context(deferred_target, deferred_block)
            pending = self._deferred_blocks
        self._deferred_blocks = None

    def _current_provider(self, target: object) -> "Layout | None":
        """Return the provider bound to the current context, looking it up if unbound.

        :param target: Current target.
        :returns: Provider or ``None``.
        """
        root_layout: Layout = self._root_layout()
        provider: Layout | None = root_layout._layout_delegate
        if provider is None:
            provider = root_layout._registry.provider_for(root_layout, type(target))
        return provider

    def _target_type_or_none(self) -> type[object] | None:
        """Return the current target's type without creating a root target.

        :returns: Target type or ``None``.
        """
        current: object = self._root_layout()._context
        if current is None:
            return None
        return type(current)

    def apply(
        self,
        method_name: str,
        args: Sequence[object] = (),
        kwargs: Mapping[str, object] | None = None,
        block: Block | None = None,
    ) -> object:
        """Apply one undeclared method to the current target or its provider.

        The bound capability provider is asked first (long form, then plain
        name). Otherwise a block switches context to the call's result
        (:meth:`apply_with_context`) and a call without a block configures the
        target directly (:meth:`apply_with_target`).

        :param method_name: Method name.
        :param args: Positional arguments.
        :param kwargs: Keyword arguments.
        :param block: Optional block.
        :returns: Result of the resolved operation.
        :raises ApplyError: If ``method_name`` is empty or cannot be applied.
        :raises UndefinedMethodError: If there is no target.
        """
        method_name = str(method_name)
        if len(method_name) == 0:
            raise ApplyError(method_name, self._target_type_or_none())

        try:
            target: object = self.target
        except NoContextError as exc:
            raise UndefinedMethodError(method_name, self) from exc

        call_args: list[object] = list(args)
        call_kwargs: dict[str, object] = {} if kwargs is None else dict(kwargs)
        long_form: tuple[str, list[object]] | None = _long_form(method_name, call_args, call_kwargs)

        provider: Layout | None = self._current_provider(target)
        if provider is not None:
            if long_form is not None and _provider_offers(provider, long_form[0]) is True:
                logger.debug("%r -> provider %s (long form)", long_form[0], type(provider).__name__)
                return _call_provider(provider, long_form[0], long_form[1], {}, block)
            if _provider_offers(provider, method_name) is True:
                logger.debug("%r -> provider %s", method_name, type(provider).__name__)
                return _call_provider(provider, method_name, call_args, call_kwargs, block)

        if block is not None:
            return self.apply_with_context(method_name, call_args, call_kwargs, block)
        return self.apply_with_target(method_name, call_args, call_kwargs)

    def _retry_translated(
        self,
        method_name: str,
        args: list[object],
        kwargs: dict[str, object],
        block: Block | None,
    ) -> tuple[bool, object]:
        """Retry :meth:`apply` with the translated spelling of ``method_name``.

        :returns: Tuple of ``(retried, result)``.
        """
        if WORD_SEPARATOR not in method_name:
            return False, None
        translated: str = self._root_layout()._naming.translate(method_name)
        if translated == method_name:
            return False, None
        logger.debug("%r -> retry as %r", method_name, translated)
        return True, self.apply(translated, args, kwargs, block=block)

    def apply_with_context(
        self,
        method_name: str,
        args: Sequence[object],
        kwargs: Mapping[str, object],
        block: Block,
    ) -> object:
        """Call ``method_name`` on the target and run ``block`` with the result as context.

        :param method_name: Method name.
        :param args: Positional arguments.
        :param kwargs: Keyword arguments.
        :param block: Block to run in the new context.
        :returns: The new context target.
        :raises ApplyError: If the target exposes no matching method.
        """
        target: object = self.target
        call_args: list[object] = list(args)
        call_kwargs: dict[str, object] = dict(kwargs)
        long_form: tuple[str, list[object]] | None = _long_form(method_name, call_args, call_kwargs)

        new_context: object
        if long_form is not None and _has_method(target, long_form[0]) is True:
            new_context = getattr(target, long_form[0])(*long_form[1])
            return self._enter_context(new_context, block)
        if _has_attribute(target, method_name) is True:
            new_context = _invoke(target, method_name, call_args, call_kwargs)
            return self._enter_context(new_context, block)

        retried, result = self._retry_translated(method_name, call_args, call_kwargs, block)
        if retried is True:
            return result
        raise ApplyError(method_name, type(target))

    def apply_with_target(
        self,
        method_name: str,
        args: Sequence[object],
        kwargs: Mapping[str, object],
    ) -> object:
        """Configure the current target directly.

        The order matters: a bare ``corner_radius()`` must read the current
        value before any setter spelling is tried.

        :param method_name: Method name.
        :param args: Positional arguments.
        :param kwargs: Keyword arguments.
        :returns: Result of the call, or the assigned value for assignments.
        :raises AttributeError: If the target supports none of the spellings.
        """
        target: object = self.target
        naming: NamingConvention = self._root_layout()._naming
        setter: str = naming.setter(method_name)
        call_args: list[object] = list(args)
        call_kwargs: dict[str, object] = dict(kwargs)
        long_form: tuple[str, list[object]] | None = _long_form(method_name, call_args, call_kwargs)
        has_arguments: bool = len(call_args) > 0 or len(call_kwargs) > 0

        if long_form is not None and _has_method(target, long_form[0]) is True:
            return getattr(target, long_form[0])(*long_form[1])
        if has_arguments is False and _has_attribute(target, method_name) is True:
            return _invoke(target, method_name, (), {})
        if _has_method(target, setter) is True:
            return getattr(target, setter)(*call_args, **call_kwargs)
        if len(call_args) == 1 and len(call_kwargs) == 0 and _can_assign(target, method_name) is True:
            setattr(target, method_name, call_args[0])
            return call_args[0]
        if _has_method(target, method_name) is True:
            return getattr(target, method_name)(*call_args, **call_kwargs)
        # These targets record setters lazily and never report them up front.
        deferred_types: tuple[type[object], ...] = self._root_layout()._deferred_application_types
        if isinstance(target, deferred_types) is True:
            return getattr(target, setter)(*call_args, **call_kwargs)

        retried, result = self._retry_translated(method_name, call_args, call_kwargs, None)
        if retried is True:
            return result
        return getattr(target, setter)(*call_args, **call_kwargs)
