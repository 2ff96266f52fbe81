"""Configuration-owned kind allow-lists used by the mapper and parser."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from xref_indexer.constants import CSS_KIND_PREFIX, CSS_KINDS, SUPPORTED_KINDS


@dataclass(frozen=True, slots=True)
class KindPolicy:
    """Closed sets deciding kind remapping and which kinds reach the indexes."""

    css_kinds: frozenset[str] = CSS_KINDS
    supported_kinds: frozenset[str] = SUPPORTED_KINDS

    def remap(self, kind: str) -> str:
        """Prefix bare CSS kinds with ``css-`` so they cannot collide with generic kinds."""

        if kind in self.css_kinds:
            return f"{CSS_KIND_PREFIX}{kind}"
        return kind

    def is_supported(self, kind: str) -> bool:
        return kind in self.supported_kinds

    @classmethod
    def from_values(
        cls,
        *,
        css_kinds: Iterable[str] | None = None,
        supported_kinds: Iterable[str] | None = None,
    ) -> KindPolicy:
        return cls(
            css_kinds=CSS_KINDS if css_kinds is None else frozenset(css_kinds),
            supported_kinds=(
                SUPPORTED_KINDS if supported_kinds is None else frozenset(supported_kinds)
            ),
        )

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> KindPolicy:
        """Build a policy from the ``[kinds]`` section of an effective config."""

        section = config.get("kinds")
        if not isinstance(section, Mapping):
            return cls()
        css = section.get("css")
        supported = section.get("supported")
        return cls.from_values(
            css_kinds=css if isinstance(css, (list, tuple)) else None,
            supported_kinds=supported if isinstance(supported, (list, tuple)) else None,
        )


DEFAULT_KIND_POLICY = KindPolicy()

__all__ = ["DEFAULT_KIND_POLICY", "KindPolicy"]
