"""
WordPress extractor module.

Maps a parsed WXR export (rss/channel/item) to post records. Comments are
nested inside each item, so they attach to their post directly.
"""

import re
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from dateutil import parser as date_parser
from rich.console import Console

from .naming import quote_escape, sanitize_filename
from .parser import as_list, text_of

console = Console()

SKIPPED_STATUSES = ('private', 'inherit')
# WordPress placeholders for "never published"
ZERO_DATES = ('-0001', '0000-00-00')
PARAGRAPH_TAG = re.compile(r'<p>', re.IGNORECASE)
DOUBLE_NEWLINE = re.compile(r'(\r?\n){2}')


def apply_paragraph_fix(content: str) -> str:
    """Wrap a body stored as plain text in paragraphs, splitting on blank lines."""
    if PARAGRAPH_TAG.search(content):
        return content
    return '<p>' + DOUBLE_NEWLINE.sub('</p>\n\n<p>', content) + '</p>'


def normalize_date(*candidates: Optional[str]) -> str:
    """Return the first candidate that parses as a date, in ISO 8601 form.

    Falls back to the first non-empty raw value.
    """
    for value in candidates:
        if not value or any(zero in value for zero in ZERO_DATES):
            continue
        try:
            return date_parser.parse(value).isoformat()
        except (ValueError, OverflowError):
            continue

    for value in candidates:
        if value:
            return value
    return ''


class WordPressExtractor:
    """Extracts posts and approved comments from a WordPress WXR export."""

    def __init__(self, paragraph_fix: bool = False, verbose: bool = False):
        self.paragraph_fix = paragraph_fix
        self.verbose = verbose
        self.stats = {'total_items': 0, 'skipped_items': 0, 'posts': 0, 'comments': 0}

    def extract(self, rss: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Extract post records from the parsed <rss> element."""
        channel = rss.get('channel') or {}
        if isinstance(channel, list):
            channel = channel[0]

        items = as_list(channel.get('item'))
        self.stats['total_items'] = len(items)
        console.print(f"   Total Post count: {len(items)}")

        posts = []
        for item in items:
            status = text_of(item.get('wp:status'))
            if status in SKIPPED_STATUSES:
                self.stats['skipped_items'] += 1
                continue
            posts.append(self._extract_post(item, status))

        self.stats['posts'] = len(posts)
        console.print(f"   Post count: {len(posts)}")
        return posts

    def _extract_post(self, item: Dict[str, Any], status: str) -> Dict[str, Any]:
        post_id = text_of(item.get('wp:post_id'))
        title = text_of(item.get('title')).strip()

        slug = sanitize_filename(unquote(text_of(item.get('wp:post_name')))) or post_id

        content = text_of(item.get('content:encoded'))
        if self.paragraph_fix:
            content = apply_paragraph_fix(content)

        tags = []
        for category in as_list(item.get('category')):
            tag = text_of(category)
            if tag and tag not in tags:
                tags.append(tag)

        comments = self._extract_comments(item)

        if self.verbose:
            console.print(f"[blue]title: '{title}' ({len(comments)} comments)[/blue]")

        return {
            'id': post_id,
            'title': quote_escape(title),
            'date': normalize_date(text_of(item.get('pubDate')), text_of(item.get('wp:post_date'))),
            'draft': status == 'draft',
            'alias': '',
            'tags': tags,
            'slug': slug,
            # Wrapped so that bodies stored as bare text still convert
            'content_html': f'<div>{content}</div>',
            'comments': comments,
        }

    def _extract_comments(self, item: Dict[str, Any]) -> List[Dict[str, Any]]:
        comments = []
        for comment in as_list(item.get('wp:comment')):
            if text_of(comment.get('wp:comment_approved')) != '1':
                continue

            content = text_of(comment.get('wp:comment_content'))
            comments.append({
                'title': '',
                'published': text_of(comment.get('wp:comment_date')),
                'author': {
                    'name': text_of(comment.get('wp:comment_author')),
                    'email': text_of(comment.get('wp:comment_author_email')),
                    'url': text_of(comment.get('wp:comment_author_url')),
                },
                'title_html': '',
                'content_html': f'<div>{content}</div>' if content else '',
            })

        self.stats['comments'] += len(comments)
        return comments
