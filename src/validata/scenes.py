"""Scene-based field selection.

A scene names the subset of fields checked in one validation context:

    scenes = {"create": ["name", "email"], "update": ["name"]}

Listing a field includes all of its dotted descendants, so listing "user"
also selects "user.name" and "user.tags.*".
"""

from collections.abc import Iterable, Mapping


class SceneSelector:
    """Decides which fields are checked for the active scene."""

    def __init__(self, scenes: Mapping[str, Iterable[str]] | None = None, scene: str = ""):
        self.scenes: dict[str, list[str]] = {
            name: list(fields) for name, fields in (scenes or {}).items()
        }
        self.scene = scene
        self.fields: frozenset[str] = self._build()

    def _build(self) -> frozenset[str]:
        if not self.scene:
            return frozenset()
        return frozenset(self.scenes.get(self.scene, ()))

    def field_list(self) -> list[str]:
        """Fields listed for the active scene, in declared order."""
        return list(self.scenes.get(self.scene, []))

    def excludes(self, field: str) -> bool:
        """Return True if field must not be checked in the active scene.

        With no active scene, or a scene that lists no fields, nothing is
        excluded.
        """
        if not self.fields:
            return False
        if field in self.fields:
            return False

        parts = field.split(".")
        for i in range(1, len(parts)):
            if ".".join(parts[:i]) in self.fields:
                return False
        return True

    def __repr__(self) -> str:
        return f"SceneSelector(scene={self.scene!r}, fields={sorted(self.fields)!r})"
