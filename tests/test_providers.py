"""Tests for capability providers, their registry and guarded delegate methods."""

import pytest

from layoutkit import CapabilityRegistry
from layoutkit import Layout
from layoutkit import meta as layout_meta
from layoutkit import meta_for
from tests.fixtures.style_targets import Button
from tests.fixtures.style_targets import Layer
from tests.fixtures.style_targets import SlotShape
from tests.fixtures.style_targets import View


class ViewLayout(Layout):
    """Provider with convenience operations for views."""

    def rounded(self, radius: float) -> float:
        """Round the layer of the current view.

        :param radius: Corner radius.
        :returns: The radius.
        """
        self.context(self.target.layer, lambda: self.corner_radius(radius))
        return radius

    def shadow(self, _block: object = None) -> object:
        """Open the current view's layer as context.

        :param _block: Block to run against the layer.
        :returns: The layer.
        """
        return self.context(self.target.layer, _block)

    def background_color(self, color: str) -> str:
        """Store an upper-cased color.

        :param color: Color name.
        :returns: Stored color.
        """
        self.target.background_color = color.upper()
        return self.target.background_color


def _title_with_color(self: ViewLayout, title: str, color: str) -> tuple[str, str]:
    self.target.background_color = color
    return title, color


setattr(ViewLayout, "title:color:", _title_with_color)


class ButtonLayout(ViewLayout):
    """Provider for buttons; inherits the view operations."""

    def title(self, text: str, color: str | None = None) -> str:
        """Set the button title.

        :param text: Title text.
        :param color: Optional color, ignored.
        :returns: Title text.
        """
        self.target.title = text
        return text


def _registry_with_view_providers() -> CapabilityRegistry:
    """Build a registry with the view and button providers.

    :returns: Fresh registry.
    """
    registry = CapabilityRegistry()
    registry.register(View, ViewLayout)
    registry.register(Button, ButtonLayout)
    return registry


def test_provider_method_wins_over_target_attribute() -> None:
    """Verify the provider is asked before the target."""
    view = View()
    layout = Layout(root=view, registry=_registry_with_view_providers())
    layout.context(view, lambda: layout.background_color("red"))
    assert view.background_color == "RED"


def test_provider_can_use_dsl_against_shared_context() -> None:
    """Verify provider methods switch context through the root layout."""
    view = View()
    layout = Layout(root=view, registry=_registry_with_view_providers())
    results: list[object] = []
    layout.context(view, lambda: results.append(layout.rounded(6.0)))
    assert results == [6.0]
    assert view.layer._corner_radius == 6.0


def test_provider_receives_block_keyword() -> None:
    """Verify a call with a block hands the block to the provider."""
    view = View()
    layout = Layout(root=view, registry=_registry_with_view_providers())
    seen: list[object] = []
    layout.context(view, lambda: seen.append(layout.shadow(_block=lambda: seen.append(layout.target))))
    assert seen == [view.layer, view.layer]


def test_provider_long_form_is_tried_first() -> None:
    """Verify keyword-style calls reach the provider's combined selector."""
    view = View()
    layout = Layout(root=view, registry=_registry_with_view_providers())
    results: list[object] = []
    layout.context(view, lambda: results.append(layout.title("Go", color="green")))
    assert results == [("Go", "green")]
    assert view.background_color == "green"


def test_provider_long_form_wins_over_plain_provider_method() -> None:
    """Verify ``title:color:`` is preferred even though ``title`` is also offered."""
    button = Button()
    layout = Layout(root=button, registry=_registry_with_view_providers())
    results: list[object] = []
    layout.context(button, lambda: results.append(layout.title("Go", color="green")))
    assert results == [("Go", "green")]
    assert button.title == ""
    assert button.background_color == "green"


def test_nearest_provider_along_mro_is_used() -> None:
    """Verify subclasses pick their own provider before the base one."""
    button = Button()
    layout = Layout(root=button, registry=_registry_with_view_providers())
    seen: list[object] = []

    def block() -> None:
        seen.append(type(layout.capability_provider))
        layout.title("OK")

    layout.context(button, block)
    assert seen == [ButtonLayout]
    assert button.title == "OK"


def test_unregistered_target_has_no_provider() -> None:
    """Verify targets without a provider fall back to direct dispatch."""
    layer = Layer()
    layout = Layout(root=layer, registry=_registry_with_view_providers())
    seen: list[object] = []
    layout.context(layer, lambda: seen.append(layout.capability_provider))
    assert seen == [None]


def test_provider_is_reused_per_root_and_type() -> None:
    """Verify one provider instance per root layout and target type."""
    registry: CapabilityRegistry = _registry_with_view_providers()
    first_view = View()
    second_view = View()
    layout = Layout(root=first_view, registry=registry)
    other_layout = Layout(root=second_view, registry=registry)
    seen: list[object] = []

    layout.context(first_view, lambda: seen.append(layout.capability_provider))
    layout.context(second_view, lambda: seen.append(layout.capability_provider))
    other_layout.context(first_view, lambda: seen.append(other_layout.capability_provider))

    assert seen[0] is seen[1]
    assert seen[0] is not seen[2]
    assert isinstance(seen[0], ViewLayout) is True
    assert seen[0].is_root is False
    assert registry.provider_for(layout, View) is seen[0]


def test_targets_registers_on_class_registry() -> None:
    """Verify ``targets`` registers the class in its registry."""

    class IsolatedLayout(Layout):
        registry = CapabilityRegistry()

    class LayerLayout(IsolatedLayout):
        def radius(self, value: float) -> None:
            self.target.setCornerRadius(value * 2)

    LayerLayout.targets(Layer)
    layer = Layer()
    layout = IsolatedLayout(root=layer)
    layout.context(layer, lambda: layout.radius(2.0))
    assert layer._corner_radius == 4.0
    assert IsolatedLayout.registry.provider_class_for(Layer) is LayerLayout


def test_register_rejects_non_classes() -> None:
    """Verify registry arguments are validated."""
    registry = CapabilityRegistry()
    with pytest.raises(TypeError):
        registry.register("View", ViewLayout)  # type: ignore[arg-type]


class FrameView(View):
    """View with a frame setter that validates its input."""

    frame_value: tuple[int, ...] | None = None

    def setFrame(self, value: tuple[int, ...]) -> None:
        """Set the frame.

        :param value: Frame tuple.
        :raises ValueError: If the frame is empty.
        """
        if len(value) == 0:
            raise ValueError("empty frame")
        self.frame_value = value


class FrameLayout(Layout):
    """Layout whose ``frame`` name would otherwise hide dynamic dispatch."""

    delegated_methods = ("frame",)


class FrameViewLayout(FrameLayout):
    """Provider inheriting the guarded ``frame`` wrapper."""


def test_guarded_method_does_not_recurse_through_provider() -> None:
    """Verify the target-scoped flag sends the provider straight to the target."""
    registry = CapabilityRegistry()
    registry.register(FrameView, FrameViewLayout)
    view = FrameView()
    layout = FrameLayout(root=view, registry=registry)

    layout.context(view, lambda: layout.frame((0, 0, 10, 10)))

    assert view.frame_value == (0, 0, 10, 10)
    assert "is_calling_frame" not in meta_for(view)


def test_guarded_flag_is_cleared_after_error() -> None:
    """Verify the guard flag is reset when the operation raises."""
    registry = CapabilityRegistry()
    registry.register(FrameView, FrameViewLayout)
    view = FrameView()
    layout = FrameLayout(root=view, registry=registry)

    with pytest.raises(ValueError, match="empty frame"):
        layout.context(view, lambda: layout.frame(()))
    assert "is_calling_frame" not in meta_for(view)

    layout.context(view, lambda: layout.frame((1, 2)))
    assert view.frame_value == (1, 2)


def test_guarded_method_with_block_switches_context() -> None:
    """Verify a guarded name with a block opens the returned object."""

    class LayerLayout(Layout):
        delegated_methods = ("layer",)

    view = View()
    layout = LayerLayout(root=view, registry=CapabilityRegistry())
    seen: list[object] = []
    layout.context(view, lambda: layout.layer(_block=lambda: seen.append(layout.target)))
    assert seen == [view.layer]


def test_delegate_method_rejects_private_names() -> None:
    """Verify private names cannot be guarded."""
    with pytest.raises(ValueError):
        Layout.delegate_method("_hidden")


def test_guard_releases_pinned_metadata_of_non_weakrefable_target() -> None:
    """Verify a guarded call does not keep a slotted target alive."""

    class FillLayout(Layout):
        delegated_methods = ("fill",)

    shape = SlotShape()
    layout = FillLayout(root=shape, registry=CapabilityRegistry())
    layout.context(shape, lambda: layout.fill("red"))

    assert shape.fill == "red"
    assert id(shape) not in layout_meta._STRONG_META
