"""Custom error types for layoutkit."""


class LayoutError(Exception):
    """Base class for all layoutkit errors."""


class NoContextError(LayoutError):
    """Raised when no target is active and no root target can be created."""


class InvalidDeferredError(LayoutError):
    """Raised when deferred work is scheduled outside of any context."""


class ApplyError(LayoutError):
    """Raised when no resolution strategy can apply a method to the target."""

    method_name: str
    target_type: type[object] | None

    def __init__(self, method_name: str, target_type: type[object] | None = None) -> None:
        """Initialize an apply failure.

        :param method_name: Method name that could not be applied.
        :param target_type: Type of the target the method was applied to.
        """
        self.method_name = method_name
        self.target_type = target_type
        type_name: str = "None" if target_type is None else target_type.__name__
        super().__init__(f"Cannot apply {method_name!r} to instance of {type_name}")


class UndefinedMethodError(LayoutError, AttributeError):
    """Raised when a dynamic method is called on a layout that has no target."""

    def __init__(self, method_name: str, layout: object) -> None:
        """Initialize an undefined-method failure.

        :param method_name: Name of the dynamic method.
        :param layout: Layout the method was called on.
        """
        layout_type_name: str = type(layout).__name__
        super().__init__(
            f"undefined method {method_name!r} for {layout_type_name} (no context)",
            name=method_name,
            obj=layout,
        )
