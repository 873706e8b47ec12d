"""Path patterns — parse and match ``/leads/{id}`` or ``/leads/:id``.

Both parameter syntaxes compile to the same ``PathSegment``. A parameter
captures exactly one non-empty path segment; literals match byte for
byte. Matching is anchored: the whole path must be consumed.

Trailing slashes are collapsed on both sides (``/leads/`` is ``/leads``).
Empty inner segments are kept, so ``/leads//7`` never matches
``/leads/{id}``.
"""

import re
from dataclasses import dataclass

from waypoint.errors import ConfigurationError
from waypoint.routing.route import PathSegment

_PARAM_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def strip_trailing_slash(path: str) -> str:
    """Collapse a single trailing slash; the root stays ``/``."""
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path or "/"


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a route path string into segments.

    Examples::

        "/leads"                     -> (PathSegment("leads"),)
        "/leads/{id}/score-history"  -> (..., PathSegment("id", is_param=True), ...)
        "/leads/:id"                 -> (..., PathSegment("id", is_param=True))

    Raises ``ConfigurationError`` for paths that don't start with ``/``,
    malformed or duplicate parameter names, and ``<name>``-style params.
    """
    if not path.startswith("/"):
        msg = f"Route path {path!r} must start with '/'."
        raise ConfigurationError(msg)

    normalised = strip_trailing_slash(path)
    if normalised == "/":
        return ()

    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in normalised[1:].split("/"):
        name = _param_name(part, path)
        if name is None:
            segments.append(PathSegment(value=part))
            continue
        if name in seen:
            msg = f"Duplicate parameter {name!r} in route path {path!r}."
            raise ConfigurationError(msg)
        seen.add(name)
        segments.append(PathSegment(value=name, is_param=True))
    return tuple(segments)


def _param_name(part: str, path: str) -> str | None:
    """Return the parameter name declared by *part*, or None for a literal."""
    if part.startswith("{") or part.endswith("}"):
        if not (part.startswith("{") and part.endswith("}")):
            msg = f"Unbalanced braces in segment {part!r} of route path {path!r}."
            raise ConfigurationError(msg)
        name = part[1:-1]
    elif part.startswith(":"):
        name = part[1:]
    elif part.startswith("<") and part.endswith(">"):
        msg = (
            f"Route path {path!r} uses <param> syntax. "
            "Use {param} or :param instead."
        )
        raise ConfigurationError(msg)
    else:
        return None

    if not _PARAM_NAME.match(name):
        msg = f"Invalid parameter name {name!r} in route path {path!r}."
        raise ConfigurationError(msg)
    return name


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """The matchable form of a route path.

    Holds the parsed segments and an anchored regex with one named group
    per parameter.
    """

    source: str
    segments: tuple[PathSegment, ...]
    regex: re.Pattern[str]

    @property
    def param_names(self) -> tuple[str, ...]:
        """Parameter names in declaration order."""
        return tuple(seg.value for seg in self.segments if seg.is_param)

    def match(self, path: str) -> dict[str, str] | None:
        """Return extracted parameters if *path* matches, else None."""
        m = self.regex.fullmatch(strip_trailing_slash(path))
        if m is None:
            return None
        return m.groupdict()


def compile_pattern(path: str) -> CompiledPattern:
    """Compile *path* into a ``CompiledPattern``."""
    segments = parse_path(path)
    if not segments:
        return CompiledPattern(source=path, segments=(), regex=re.compile("/"))

    parts: list[str] = []
    for seg in segments:
        if seg.is_param:
            parts.append(f"(?P<{seg.value}>[^/]+)")
        else:
            parts.append(re.escape(seg.value))
    return CompiledPattern(
        source=path,
        segments=segments,
        regex=re.compile("/" + "/".join(parts)),
    )
