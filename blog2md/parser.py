"""
Parser module for blog exports.

Handles loading and validating Blogger Atom and WordPress WXR export files.
"""

import os
from typing import Dict, List, Optional, Any
from xml.parsers.expat import ExpatError

import xmltodict
from rich.console import Console

from .errors import ExportParseError

console = Console()

BLOGGER = 'b'
WORDPRESS = 'w'

# Elements that may occur once or many times; always parse them as lists
REPEATED_ELEMENTS = (
    'entry',
    'category',
    'link',
    'item',
    'wp:comment',
    'wp:postmeta',
)

ROOT_ELEMENTS = {
    BLOGGER: 'feed',
    WORDPRESS: 'rss',
}


def text_of(node: Any) -> str:
    """Return the text of a parsed element, whether or not it carried attributes."""
    if node is None:
        return ''
    if isinstance(node, list):
        return text_of(node[0]) if node else ''
    if isinstance(node, dict):
        return node.get('#text') or ''
    return str(node)


def as_list(node: Any) -> List[Any]:
    """Wrap a parsed element in a list unless it already is one."""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


class ExportParser:
    """Parser for blog export files."""

    def __init__(self, export_path: str, source: str):
        """Initialize parser with export file path and source type (b or w)."""
        if source not in ROOT_ELEMENTS:
            raise ValueError(f"Unknown export source '{source}', expected one of: b, w")

        self.export_path = export_path
        self.source = source
        self.export_data: Optional[Dict[str, Any]] = None

    def load_export(self) -> Dict[str, Any]:
        """Load and validate the export file, returning the root element."""
        if not os.path.exists(self.export_path):
            raise ExportParseError(f"Export file not found: {self.export_path}")

        try:
            with open(self.export_path, 'rb') as f:
                raw = f.read()
        except OSError as e:
            raise ExportParseError(f"Error reading export file: {e}")

        self.export_data = self.parse_string(raw)
        return self.get_root()

    def parse_string(self, raw) -> Dict[str, Any]:
        """Parse raw XML (bytes or str) into a dict tree."""
        try:
            data = xmltodict.parse(raw, force_list=REPEATED_ELEMENTS)
        except ExpatError as e:
            raise ExportParseError(f"Error parsing xml file ({self.export_path}): {e}")

        self._validate_export(data)
        return data

    def _validate_export(self, data: Dict[str, Any]) -> None:
        """Validate the export data structure."""
        expected_root = ROOT_ELEMENTS[self.source]

        if not isinstance(data, dict) or expected_root not in data:
            found = ', '.join(data.keys()) if isinstance(data, dict) else type(data).__name__
            raise ExportParseError(
                f"Expected a <{expected_root}> document for source '{self.source}', found: {found}"
            )

        root = data[expected_root]
        if self.source == BLOGGER:
            if not isinstance(root, dict) or not root.get('entry'):
                console.print("[yellow]Warning: No entries found in export[/yellow]")
        else:
            channel = root.get('channel') if isinstance(root, dict) else None
            if not channel:
                raise ExportParseError("WordPress export must contain a <channel> element")

    def get_root(self) -> Dict[str, Any]:
        """Get the root element (feed or rss)."""
        if self.export_data is None:
            raise RuntimeError("Must call load_export() first")

        return self.export_data[ROOT_ELEMENTS[self.source]] or {}
