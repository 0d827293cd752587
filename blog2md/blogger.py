"""
Blogger extractor module.

Maps a parsed Blogger Atom export (feed/entry) to post records. Comments are
separate entries that point back at their post through thr:in-reply-to, so
posts are indexed by id first and comments attached in a second pass.
"""

import re
from typing import Any, Dict, List
from urllib.parse import urlparse

from rich.console import Console

from .errors import OrphanCommentError
from .naming import file_name_from_title, quote_escape
from .parser import as_list, text_of

console = Console()

POST_MARKER = '.post-'
REPLY_TO = 'thr:in-reply-to'
RESERVED_TERM_PREFIX = 'http://schemas.google'
HOST_PREFIX = re.compile(r'^.*//[^/]+')


def is_post(entry: Dict[str, Any]) -> bool:
    return POST_MARKER in text_of(entry.get('id')) and not entry.get(REPLY_TO)


def is_comment(entry: Dict[str, Any]) -> bool:
    return POST_MARKER in text_of(entry.get('id')) and bool(entry.get(REPLY_TO))


def post_id_of(entry: Dict[str, Any]) -> str:
    """tag:blogger.com,1999:blog-123.post-456 -> 456"""
    return text_of(entry.get('id')).split('-')[-1]


def alias_from_url(url: str) -> str:
    """Strip scheme and host, keeping the host-relative path."""
    return HOST_PREFIX.sub('', url or '')


class BloggerExtractor:
    """Extracts posts and comments from a Blogger Atom export."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.stats = {'total_entries': 0, 'posts': 0, 'comments': 0, 'orphaned_comments': 0}

    def extract(self, feed: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Extract post records, with their comments attached, from the parsed <feed>."""
        entries = as_list(feed.get('entry'))
        self.stats['total_entries'] = len(entries)
        console.print(f"   Total no. of entries found: {len(entries)}")

        post_entries = [entry for entry in entries if is_post(entry)]
        comment_entries = [entry for entry in entries if is_comment(entry)]

        console.print(f"   Content-posts {len(post_entries)}")
        console.print(f"   Content-Comments {len(comment_entries)}")

        posts = []
        posts_by_id: Dict[str, Dict[str, Any]] = {}
        for entry in post_entries:
            post = self._extract_post(entry)
            posts.append(post)
            posts_by_id[post['id']] = post

        for entry in comment_entries:
            comment = self._extract_comment(entry)
            try:
                self._attach_comment(posts_by_id, self._reply_target(entry), comment)
            except OrphanCommentError as e:
                self.stats['orphaned_comments'] += 1
                console.print(f"[yellow]Warning: {e}, dropping comment[/yellow]")

        self.stats['posts'] = len(posts)
        return posts

    def _extract_post(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        post_id = post_id_of(entry)
        title = text_of(entry.get('title'))

        control = entry.get('app:control') or {}
        draft = isinstance(control, dict) and text_of(control.get('app:draft')) == 'yes'

        tags = []
        for category in as_list(entry.get('category')):
            term = category.get('@term') if isinstance(category, dict) else None
            if term and RESERVED_TERM_PREFIX not in term and term not in tags:
                tags.append(term)

        url = ''
        for link in as_list(entry.get('link')):
            if not isinstance(link, dict):
                continue
            if link.get('@rel') == 'alternate' and link.get('@type') == 'text/html' and link.get('@href'):
                url = link['@href']
                break

        if self.verbose:
            console.print(f"[blue]title: \"{title}\" date: {text_of(entry.get('published'))} draft: {draft}[/blue]")

        return {
            'id': post_id,
            'title': quote_escape(title),
            'date': text_of(entry.get('published')),
            'draft': draft,
            'alias': alias_from_url(url),
            'tags': tags,
            'slug': file_name_from_title(title) or post_id,
            'content_html': text_of(entry.get('content')),
            'comments': [],
        }

    def _extract_comment(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        author = as_list(entry.get('author'))
        author = author[0] if author and isinstance(author[0], dict) else {}

        return {
            'id': text_of(entry.get('id')),
            'published': text_of(entry.get('published')),
            'author': {
                'name': text_of(author.get('name')),
                'email': text_of(author.get('email')),
                'url': text_of(author.get('uri')),
            },
            'title_html': text_of(entry.get('title')),
            'content_html': text_of(entry.get('content')),
        }

    def _reply_target(self, entry: Dict[str, Any]) -> str:
        """Post id a comment replies to: the last path segment of its source URL."""
        reply = as_list(entry.get(REPLY_TO))[0]
        source = reply.get('@source', '') if isinstance(reply, dict) else ''
        return urlparse(source).path.rstrip('/').split('/')[-1]

    def _attach_comment(self, posts_by_id: Dict[str, Dict[str, Any]], post_id: str,
                        comment: Dict[str, Any]) -> None:
        post = posts_by_id.get(post_id)
        if post is None:
            raise OrphanCommentError(post_id, comment.get('id', ''))

        post['comments'].append(comment)
        self.stats['comments'] += 1
