"""
Output writer module.

Lays out post and comment files (flat or page bundles), renders frontmatter
and comments with the Jinja templates, and writes them to disk.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser as date_parser
from jinja2 import Environment, FileSystemLoader
from rich.console import Console

from .naming import quote_escape

console = Console()

COMMENTS_HEADING = '\n---\n### Comments:\n'


def squote(value: Any) -> str:
    """Render a value as a single-quoted YAML scalar."""
    return "'%s'" % quote_escape(str(value))


def readable_date(value: str) -> str:
    """Format a timestamp as e.g. 'Mar 4, 2012'; unparseable values pass through."""
    if not value:
        return ''
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


class OutputWriter:
    """Writes post and comment Markdown files."""

    def __init__(self, output_dir: Path, merge_comments: bool = False, page_bundles: bool = False,
                 template_dir: Optional[str] = None):
        """Initialize writer with output layout and template directory."""
        if template_dir is None:
            template_dir = Path(__file__).parent / "templates"

        self.output_dir = Path(output_dir)
        self.merge_comments = merge_comments
        self.page_bundles = page_bundles
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )
        self.jinja_env.filters['squote'] = squote
        self.jinja_env.filters['readable_date'] = readable_date
        self.failures: List[str] = []

    def post_paths(self, slug: str) -> Optional[Tuple[Path, Path]]:
        """Return (post file, comments file) for a slug, creating the directory.

        Returns None and records the failure when the directory cannot be made.
        """
        if self.page_bundles:
            entry_dir = self.output_dir / slug
            post_path = entry_dir / 'index.md'
            comments_path = entry_dir / 'comments.md'
        else:
            entry_dir = self.output_dir
            post_path = entry_dir / f'{slug}.md'
            comments_path = entry_dir / f'{slug}-comments.md'

        try:
            entry_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.failures.append(str(entry_dir))
            console.print(f"[red]Error while creating {entry_dir} - {e}[/red]")
            return None
        return post_path, comments_path

    def render_header(self, post: Dict[str, Any]) -> str:
        """Render the frontmatter block, ending in a newline."""
        template = self.jinja_env.get_template('post.md.j2')
        return template.render(post=post) + '\n'

    def render_comments(self, comments: List[Dict[str, Any]]) -> str:
        template = self.jinja_env.get_template('comments.md.j2')
        return template.render(comments=comments)

    def write_post(self, post: Dict[str, Any]) -> bool:
        """Write frontmatter and body to the post file."""
        content = f"{self.render_header(post)}\n{post.get('content', '')}"
        return self._write(post['post_path'], content)

    def write_comments(self, post: Dict[str, Any]) -> bool:
        """Append comments to the post file or write them to the comments file."""
        comments = post.get('comments') or []
        if not comments:
            return True

        rendered = self.render_comments(comments)
        if self.merge_comments:
            return self._write(post['post_path'], f"{COMMENTS_HEADING}{rendered}", append=True)

        return self._write(post['comments_path'], f"{self.render_header(post)}\n{rendered}")

    def _write(self, path: Path, content: str, append: bool = False) -> bool:
        mode = 'a' if append else 'w'
        try:
            with open(path, mode, encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            self.failures.append(str(path))
            action = 'appending to' if append else 'writing to'
            console.print(f"[red]Error while {action} {path} - {e}[/red]")
            return False

        return True
