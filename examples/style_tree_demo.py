"""Show a layoutkit session styling a small widget tree."""

import argparse
import logging
import pathlib
import sys


def _ensure_src_path(src_path: str) -> None:
    """Ensure ``src`` is importable in the current interpreter.

    :param src_path: Absolute path to the repository ``src`` directory.
    """
    exists: bool = src_path in sys.path
    if exists is False:
        sys.path.insert(0, src_path)


class Layer:
    """Backing layer with a camelCase API."""

    def __init__(self) -> None:
        self._corner_radius: float = 0.0
        self._border_width: float = 0.0

    def cornerRadius(self) -> float:
        return self._corner_radius

    def setCornerRadius(self, value: float) -> None:
        self._corner_radius = value

    def setBorderWidth(self, value: float) -> None:
        self._border_width = value


class Widget:
    """Minimal widget with assignable attributes and children."""

    def __init__(self, name: str) -> None:
        self.name: str = name
        self.background_color: str = "transparent"
        self.text: str = ""
        self.layer: Layer = Layer()
        self.children: list[Widget] = []

    def add(self, name: str) -> "Widget":
        child = Widget(name)
        self.children.append(child)
        return child


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments.

    :returns: Parsed CLI arguments.
    """
    parser = argparse.ArgumentParser(description="Style a widget tree with a layoutkit session.")
    parser.add_argument("--radius", type=float, default=6.0, help="Corner radius for buttons.")
    parser.add_argument("--buttons", type=int, default=3, help="Number of buttons to add.")
    parser.add_argument("--verbose", action="store_true", help="Log dispatch decisions.")
    return parser.parse_args()


def main() -> int:
    """Run the demonstration.

    :returns: Process exit code where ``0`` indicates success.
    """
    args: argparse.Namespace = _parse_args()
    radius: float = float(args.radius)
    buttons: int = int(args.buttons)
    if buttons < 1:
        print("buttons must be >= 1")
        return 1
    if args.verbose is True:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    repo_root: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
    _ensure_src_path(str(repo_root / "src"))

    from layoutkit import CapabilityRegistry
    from layoutkit import Layout

    registry = CapabilityRegistry()

    class WidgetLayout(Layout):
        """Convenience operations for widgets."""

        def rounded(self, value: float) -> None:
            self.layer(_block=lambda: self.corner_radius(value))

    registry.register(Widget, WidgetLayout)

    class ScreenLayout(Layout):
        """Top-level description of the screen."""

        def layout(self) -> None:
            self.background_color("white")
            for index in range(buttons):
                self.add(f"button-{index}", _block=self.style_button)

        def style_button(self) -> None:
            button: object = self.target
            self.text(f"Button {getattr(button, 'name')}")
            self.rounded(radius)
            # Border width is derived from the final radius.
            self.deferred(lambda: self.layer(_block=lambda: self.border_width(self.corner_radius() / 2)))

    screen = Widget("screen")
    layout = ScreenLayout(root=screen, registry=registry)
    layout.build()

    print("layoutkit style tree demo")
    print(f"screen background={screen.background_color}")
    all_ok: bool = screen.background_color == "white" and len(screen.children) == buttons
    for child in screen.children:
        print(
            f"  {child.name}: text={child.text!r} radius={child.layer.cornerRadius()} "
            + f"border={child.layer._border_width}"
        )
        child_ok: bool = child.layer.cornerRadius() == radius and child.layer._border_width == radius / 2
        all_ok = all_ok and child_ok

    if all_ok is True:
        print("DEMO RESULT: PASS")
        return 0
    print("DEMO RESULT: FAIL")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
