"""
Snippet collection store.

Loads snippets from the primary snippet file and any auxiliary snippet
directories, keeps track of which file each snippet came from, and writes
them back to the same files.
"""

import logging
import tomllib
from pathlib import Path
from typing import Iterable, Optional, Union

import tomli_w

from snipsync.exceptions import (
    ConfigError,
    ParseError,
    SerializationError,
    SnippetIOError,
)
from snipsync.snippet.model import Snippet


logger = logging.getLogger(__name__)

DEFAULT_SORT = "recency"
DEFAULT_EXTENSION = ".toml"
SORT_FIELDS = ("command", "description", "output")
TOP_LEVEL_KEY = "snippets"

PathLike = Union[str, Path]


#region Serialization

def parse_snippets(text: str, origin: str = "") -> list[Snippet]:
    """
    Parse TOML snippet file content.

    Args:
        text: File content
        origin: Origin recorded on every parsed snippet

    Returns:
        Snippets in file order

    Raises:
        ParseError: If the content is not a valid snippet file
    """
    where = origin or "<text>"
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ParseError(f"Failed to parse snippet file {where}: {e}", path=origin) from e

    records = data.get(TOP_LEVEL_KEY, [])
    if not isinstance(records, list):
        raise ParseError(
            f"Failed to parse snippet file {where}: '{TOP_LEVEL_KEY}' must be an array of tables",
            path=origin,
        )

    snippets = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ParseError(
                f"Failed to parse snippet file {where}: entry {index} is not a table",
                path=origin,
            )
        try:
            snippets.append(Snippet.from_record(record, origin=origin))
        except ValueError as e:
            raise ParseError(
                f"Failed to parse snippet file {where}: entry {index}: {e}",
                path=origin,
            ) from e

    return snippets


def dump_snippets(snippets: Iterable[Snippet]) -> str:
    """
    Serialize snippets to TOML text, ignoring origin.

    Raises:
        SerializationError: If the snippets cannot be encoded
    """
    blocks = []
    for snippet in snippets:
        record = snippet.to_record()
        # A raw "\r" inside a multi-line string is read back as a plain newline
        values = [record["command"], record["description"], record["output"], *record["tags"]]
        multiline = not any("\r" in value for value in values)
        try:
            body = tomli_w.dumps(record, multiline_strings=multiline)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to convert snippets to TOML: {e}") from e
        blocks.append(f"[[{TOP_LEVEL_KEY}]]\n{body}")
    return "\n".join(blocks)

#endregion


#region Ordering and filtering

def order_snippets(snippets: list[Snippet], sort_by: str = DEFAULT_SORT) -> None:
    """
    Reorder snippets in place.

    "command", "description" and "output" (optionally prefixed with "+")
    sort descending by that field; a "-" prefix sorts ascending.
    "recency" keeps load order and "-recency" reverses it. Anything else
    leaves the order untouched. Sorting is stable.
    """
    sort_by = sort_by or DEFAULT_SORT
    reverse_prefix = sort_by.startswith("-")
    key = sort_by[1:] if sort_by[:1] in ("+", "-") else sort_by

    if key in SORT_FIELDS:
        snippets.sort(key=lambda s: getattr(s, key), reverse=not reverse_prefix)
    elif key == "recency":
        if reverse_prefix:
            snippets.reverse()
    else:
        logger.debug("Unknown sort spec %r, keeping load order", sort_by)


def filter_by_tags(snippets: Iterable[Snippet], tags: list[str]) -> list[Snippet]:
    """Keep snippets that carry at least one of `tags`, in input order."""
    return [snippet for snippet in snippets if snippet.has_any_tag(tags)]

#endregion


class SnippetStore:
    """
    Loads and saves snippet collections.

    Bound to one primary snippet file, zero or more auxiliary snippet
    directories, the file extension looked for in those directories and a
    sort spec.
    """

    def __init__(
        self,
        snippet_file: PathLike,
        snippet_dirs: Optional[Iterable[PathLike]] = None,
        sort_by: str = DEFAULT_SORT,
        extension: str = DEFAULT_EXTENSION,
    ):
        self.snippet_file = Path(snippet_file)
        self.snippet_dirs = [Path(d) for d in (snippet_dirs or [])]
        self.sort_by = sort_by or DEFAULT_SORT
        self.extension = extension or DEFAULT_EXTENSION

    @classmethod
    def from_settings(cls, settings) -> "SnippetStore":
        """Create a store from a `Settings` object."""
        general = settings.general
        return cls(
            snippet_file=general.snippet_path,
            snippet_dirs=general.snippet_dir_paths,
            sort_by=general.sort_by,
            extension=general.snippet_extension,
        )

    def load(self, include_auxiliary: bool = True) -> list[Snippet]:
        """
        Load all snippets.

        Args:
            include_auxiliary: Also load every file with the snippet extension
                in the snippet directories

        Returns:
            Ordered list of snippets, each tagged with its origin file

        Raises:
            ConfigError: If the primary file or a snippet directory is missing
            SnippetIOError: If a file cannot be inspected or read
            ParseError: If any file is malformed or not UTF-8
        """
        files = [self._resolve_primary()]
        if include_auxiliary:
            for directory in self.snippet_dirs:
                files.extend(self._discover(directory))

        snippets: list[Snippet] = []
        for path in files:
            try:
                text = path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"Failed to parse snippet file {path}: {e}", path=str(path)) from e
            except OSError as e:
                raise SnippetIOError(f"Failed to load snippet file {path}: {e}") from e
            loaded = parse_snippets(text, origin=str(path))
            logger.debug("Loaded %d snippets from %s", len(loaded), path)
            snippets.extend(loaded)

        order_snippets(snippets, self.sort_by)
        return snippets

    def save(self, snippets: Iterable[Snippet]) -> None:
        """
        Write snippets back to the files they came from.

        Each file is overwritten with exactly the snippets whose origin
        points at it. Snippets without an origin go to the primary file.
        Files already written are not rolled back if a later one fails.

        Raises:
            SerializationError: If a group cannot be encoded
            SnippetIOError: If a file cannot be written
        """
        groups: dict[str, list[Snippet]] = {}
        for snippet in snippets:
            origin = snippet.origin or str(self.snippet_file)
            groups.setdefault(origin, []).append(snippet)

        for origin, members in groups.items():
            content = dump_snippets(members)
            try:
                Path(origin).write_text(content, encoding="utf-8")
            except OSError as e:
                raise SnippetIOError(f"Failed to save snippet file {origin}: {e}") from e
            logger.debug("Saved %d snippets to %s", len(members), origin)

    def to_text(self, snippets: Iterable[Snippet]) -> str:
        """Serialize the whole collection to one TOML string."""
        return dump_snippets(snippets)

    def _resolve_primary(self) -> Path:
        path = self.snippet_file
        try:
            path.stat()
        except FileNotFoundError as e:
            raise ConfigError(
                f"Snippet file not found: {path}\n"
                "Run 'snipsync configure' and provide a correct file path, or "
                "remove it if you only want to use snippet directories."
            ) from e
        except OSError as e:
            raise SnippetIOError(
                f"Failed to load snippet file {path}: {e}\n"
                "Run 'snipsync configure' to check the snippet file setting."
            ) from e
        return path

    def _discover(self, directory: Path) -> list[Path]:
        if not directory.exists():
            raise ConfigError(
                f"Snippet directory not found: {directory}\n"
                "Run 'snipsync configure' to fix the snippet directories."
            )
        if not directory.is_dir():
            raise ConfigError(f"Snippet directory is not a directory: {directory}")

        try:
            return sorted(
                p for p in directory.iterdir()
                if p.is_file() and p.name.endswith(self.extension) and not p.name.startswith(".")
            )
        except OSError as e:
            raise SnippetIOError(f"Failed to list snippet directory {directory}: {e}") from e
