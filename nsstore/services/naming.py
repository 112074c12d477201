"""Name validation and key layout for namespaced objects."""

from __future__ import annotations

from nsstore.services.base import InvalidNameError

TRAVERSAL_SEQUENCE = ".."
KEY_SEPARATOR = "/"


def check_name(name: str) -> str:
    """Return ``name`` unchanged, or raise if it contains a traversal sequence."""
    if TRAVERSAL_SEQUENCE in name:
        raise InvalidNameError()
    return name


def check_namespace(name: str) -> str:
    """Validate a namespace name.

    A namespace owns every key under ``"{name}/"``, so the name itself must be
    non-empty and free of separators; otherwise ``"foo/"`` or ``"foo/bar"``
    would share keys with ``"foo"``.
    """
    check_name(name)
    if not name:
        raise InvalidNameError("bucket name cannot be empty")
    if KEY_SEPARATOR in name:
        raise InvalidNameError("bucket name cannot contain '/'")
    return name


def namespace_prefix(namespace: str) -> str:
    """Key prefix shared by every object inside ``namespace``."""
    return f"{namespace}{KEY_SEPARATOR}"


def join_key(namespace: str, key: str) -> str:
    """Map ``(namespace, key)`` to the key used in the shared bucket.

    Leading and repeated slashes in ``key`` are collapsed, so ``/fizz/bar.jpg``
    and ``fizz/bar.jpg`` land on the same object. A trailing slash is kept
    because it matters for prefix listings.
    """
    segments = [segment for segment in key.split(KEY_SEPARATOR) if segment]
    if not segments:
        return namespace_prefix(namespace)
    joined = namespace_prefix(namespace) + KEY_SEPARATOR.join(segments)
    if key.endswith(KEY_SEPARATOR):
        joined += KEY_SEPARATOR
    return joined
