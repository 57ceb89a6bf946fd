"""Method-naming conventions used when probing targets."""

from typing import Literal

WORD_SEPARATOR: str = "_"
ConventionName = Literal["camel", "snake"]


def camel_case_name(method_name: str) -> str:
    """Convert a ``word_separated`` name into ``camelCase``.

    Leading separators are kept so private-looking names stay private.

    :param method_name: Word-separated method name.
    :returns: ``camelCase`` method name.
    """
    stripped: str = method_name.lstrip(WORD_SEPARATOR)
    prefix: str = method_name[: len(method_name) - len(stripped)]
    words: list[str] = [word for word in stripped.split(WORD_SEPARATOR) if len(word) > 0]
    if len(words) == 0:
        return method_name

    converted: list[str] = [words[0]]
    for word in words[1:]:
        converted.append(word[0].upper() + word[1:])
    return prefix + "".join(converted)


def camel_case_setter(method_name: str) -> str:
    """Return the ``setFoo`` spelling of ``foo``.

    :param method_name: Attribute-style method name.
    :returns: Setter method name.
    """
    if len(method_name) == 0:
        return "set"
    return "set" + method_name[0].upper() + method_name[1:]


def snake_case_setter(method_name: str) -> str:
    """Return the ``set_foo`` spelling of ``foo``.

    :param method_name: Attribute-style method name.
    :returns: Setter method name.
    """
    return f"set_{method_name}"


class NamingConvention:
    """Pair of translator and setter-spelling functions for one target ecosystem."""

    name: ConventionName

    def __init__(self, name: ConventionName) -> None:
        """Initialize a naming convention.

        :param name: Convention name, ``camel`` or ``snake``.
        :raises ValueError: If the convention name is unsupported.
        """
        if name != "camel" and name != "snake":
            raise ValueError("naming convention must be one of: camel, snake")
        self.name = name

    def translate(self, method_name: str) -> str:
        """Translate a word-separated name into this convention.

        :param method_name: Word-separated method name.
        :returns: Translated name; identical to the input when nothing changes.
        """
        if self.name == "camel":
            return camel_case_name(method_name)
        return method_name

    def setter(self, method_name: str) -> str:
        """Return the setter spelling of ``method_name`` in this convention.

        :param method_name: Attribute-style method name.
        :returns: Setter method name.
        """
        if self.name == "camel":
            return camel_case_setter(method_name)
        return snake_case_setter(method_name)

    def __repr__(self) -> str:
        return f"NamingConvention({self.name!r})"


CAMEL_CASE: NamingConvention = NamingConvention("camel")
SNAKE_CASE: NamingConvention = NamingConvention("snake")


def resolve_convention(naming: "NamingConvention | str") -> NamingConvention:
    """Validate and normalize a naming-convention setting.

    :param naming: Convention object or its name.
    :returns: Naming convention object.
    :raises TypeError: If ``naming`` is neither a convention nor a string.
    :raises ValueError: If the convention name is unsupported.
    """
    if isinstance(naming, NamingConvention) is True:
        return naming
    if isinstance(naming, str) is False:
        raise TypeError("naming must be a NamingConvention or a convention name")
    if naming == "camel":
        return CAMEL_CASE
    if naming == "snake":
        return SNAKE_CASE
    raise ValueError("naming must be one of: camel, snake")
