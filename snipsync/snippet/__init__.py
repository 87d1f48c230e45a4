"""
Snippet model and collection store.

Loads snippets from the primary snippet file and snippet directories,
orders and filters them, and writes them back to where they came from.
"""

from snipsync.snippet.model import Snippet
from snipsync.snippet.store import SnippetStore, filter_by_tags, order_snippets

__all__ = ["Snippet", "SnippetStore", "filter_by_tags", "order_snippets"]
