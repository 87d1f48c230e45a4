"""
Snippet data model.
"""

from dataclasses import dataclass, field
from typing import Any


# Keys written for every record, in this order
RECORD_KEYS = ("description", "command", "tags", "output")


@dataclass
class Snippet:
    """A single reusable command entry."""
    command: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    output: str = ""
    # Backing file this snippet was loaded from; "" means the primary file.
    # Never serialized.
    origin: str = field(default="", compare=False)

    def to_record(self) -> dict[str, Any]:
        """Return the TOML record for this snippet (origin excluded)."""
        record = {key: getattr(self, key) for key in RECORD_KEYS}
        record["tags"] = list(self.tags)
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any], origin: str = "") -> "Snippet":
        """
        Build a snippet from a parsed TOML record.

        Unknown keys are ignored. The legacy key "tag" is read when "tags"
        is absent.

        Raises:
            ValueError: If a field has the wrong type
        """
        tags = record.get("tags", record.get("tag", []))
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValueError("'tags' must be an array of strings")

        values = {}
        for key in ("command", "description", "output"):
            value = record.get(key, "")
            if not isinstance(value, str):
                raise ValueError(f"'{key}' must be a string")
            values[key] = value

        return cls(
            command=values["command"],
            description=values["description"],
            tags=list(tags),
            output=values["output"],
            origin=origin,
        )

    def has_any_tag(self, tags: list[str]) -> bool:
        """True if this snippet has at least one tag and one of them is in `tags`."""
        if not self.tags:
            return False
        return any(tag in self.tags for tag in tags)
