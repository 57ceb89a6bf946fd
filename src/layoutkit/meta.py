"""Per-object metadata slots attached to arbitrary configuration targets."""

import threading
import weakref

_META_LOCK: threading.Lock = threading.Lock()
_WEAK_META: "weakref.WeakKeyDictionary[object, dict[str, object]]" = weakref.WeakKeyDictionary()
_STRONG_META: dict[int, tuple[object, dict[str, object]]] = {}


def _is_weakrefable(value: object) -> bool:
    """Report whether ``value`` accepts weak references.

    :param value: Candidate object.
    :returns: ``True`` when ``weakref.ref(value)`` succeeds.
    """
    try:
        weakref.ref(value)
    except TypeError:
        return False
    return True


def meta_for(target: object) -> dict[str, object]:
    """Return the mutable metadata mapping attached to ``target``.

    Weak-referenceable objects keep their slot only as long as they live.
    Other objects (ints, strings, ``__slots__`` classes) are pinned in a
    strong table keyed by identity until :func:`clear_meta` releases them.

    :param target: Any object.
    :returns: Metadata dictionary owned by ``target``.
    """
    with _META_LOCK:
        if _is_weakrefable(target) is True:
            try:
                existing: dict[str, object] | None = _WEAK_META.get(target)
            except TypeError:
                existing = None
            else:
                if existing is None:
                    existing = {}
                    _WEAK_META[target] = existing
                return existing

        identity: int = id(target)
        pinned: tuple[object, dict[str, object]] | None = _STRONG_META.get(identity)
        if pinned is not None and pinned[0] is target:
            return pinned[1]
        slot: dict[str, object] = {}
        _STRONG_META[identity] = (target, slot)
        return slot


def clear_meta(target: object) -> None:
    """Drop the metadata slot attached to ``target`` if one exists.

    :param target: Any object.
    """
    with _META_LOCK:
        if _is_weakrefable(target) is True:
            try:
                _WEAK_META.pop(target, None)
            except TypeError:
                pass
        pinned: tuple[object, dict[str, object]] | None = _STRONG_META.get(id(target))
        if pinned is not None and pinned[0] is target:
            _STRONG_META.pop(id(target), None)
