"""Mount prefix normalisation.

The same app may be reached under several base paths depending on the
deployment (``/custom/api``, ``/custom/api/index.php``, ``/api``). Route
patterns are always matched against the prefix-free path, so the prefix
is stripped once, from a table, before routing.
"""

from collections.abc import Iterable


class MountPrefixes:
    """An ordered table of mount prefixes.

    ``strip`` removes the first prefix that matches on a segment boundary.
    Longer prefixes are tried first so ``/api/index.php`` wins over
    ``/api`` whatever order they were declared in::

        prefixes = MountPrefixes(["/custom/api", "/custom/api/index.php"])
        prefixes.strip("/custom/api/index.php/leads/7")  # "/leads/7"
        prefixes.strip("/custom/apis/leads")             # unchanged
    """

    __slots__ = ("_prefixes",)

    def __init__(self, prefixes: Iterable[str] = ()) -> None:
        cleaned = {p.rstrip("/") for p in prefixes if p.rstrip("/")}
        self._prefixes: tuple[str, ...] = tuple(sorted(cleaned, key=len, reverse=True))

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    def __bool__(self) -> bool:
        return bool(self._prefixes)

    def __repr__(self) -> str:
        return f"MountPrefixes({list(self._prefixes)!r})"

    def strip(self, path: str, root_path: str = "") -> str:
        """Return *path* with ``root_path`` and the first matching prefix removed.

        An empty remainder becomes ``/``.
        """
        if root_path:
            path = _strip_one(path, root_path.rstrip("/")) or path
        for prefix in self._prefixes:
            stripped = _strip_one(path, prefix)
            if stripped is not None:
                return stripped
        return path or "/"


def _strip_one(path: str, prefix: str) -> str | None:
    """Strip *prefix* from *path* on a segment boundary; None if it doesn't apply."""
    if not prefix or not path.startswith(prefix):
        return None
    rest = path[len(prefix) :]
    if rest == "":
        return "/"
    if rest.startswith("/"):
        return rest
    return None
