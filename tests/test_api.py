"""Tests for the user-facing entrypoints."""

from layoutkit import CapabilityRegistry
from layoutkit import Layout
from layoutkit import configure
from layoutkit import register_provider
from tests.fixtures.style_targets import Layer
from tests.fixtures.style_targets import View


class PillLayout(Layout):
    """Provider that rounds layers into pills."""

    def pill(self, height: float) -> None:
        """Round the current layer to half its height.

        :param height: Layer height.
        """
        self.corner_radius(height / 2)


def test_configure_runs_block_and_deferred_work() -> None:
    """Verify ``configure`` runs a full top-level session."""
    view = View()
    order: list[str] = []

    def style(layout: Layout) -> None:
        layout.deferred(lambda: order.append("deferred"))
        layout.background_color("white")
        layout.layer(_block=lambda: layout.corner_radius(3.0))
        order.append("body")

    returned: object = configure(view, style, registry=CapabilityRegistry())

    assert returned is view
    assert view.background_color == "white"
    assert view.layer._corner_radius == 3.0
    assert order == ["body", "deferred"]


def test_register_provider_targets_given_registry() -> None:
    """Verify ``register_provider`` wires a provider into a registry."""
    registry = CapabilityRegistry()
    register_provider(Layer, PillLayout, registry=registry)
    view = View()

    configure(view, lambda layout: layout.layer(_block=lambda: layout.pill(10.0)), registry=registry)

    assert view.layer._corner_radius == 5.0
