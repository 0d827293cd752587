"""
HTML to Markdown module.

Converts post and comment HTML to Markdown with markdownify, adding rules
for preformatted blocks, embedded base64 images and linked images.
"""

import re
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlparse

from bs4 import Comment, NavigableString, Tag
from markdownify import ATX, MarkdownConverter

BASE64_PNG_PREFIX = 'data:image/png;base64,'
NON_BASE64_CHARS = re.compile(r'[^-a-z0-9+/=]', re.IGNORECASE)
IMAGE_SHORTCODE = '{{<imglink title="Image" src="%s" size="%s">}}'
DEFAULT_SHORTCODE_SIZE = '500x500'
DEFAULT_IMAGE_EXTENSION = 'jpg'
DEFAULT_ALT = 'Image alt'


class ImageContext:
    """Per-post state for naming extracted images.

    Images are numbered from 1 for each post and written next to the post
    file as <post-file-stem><n>.<ext>.
    """

    def __init__(self, post_path: Path):
        self.post_path = Path(post_path)
        self.count = 0

    def next_image_path(self, extension: str) -> Path:
        self.count += 1
        stem = self.post_path.with_suffix('')
        return stem.parent / f"{stem.name}{self.count}.{extension}"


def image_extension(url: str) -> str:
    """Guess an image file extension from the URL path."""
    suffix = PurePosixPath(urlparse(url).path).suffix
    return suffix[1:].lower() if len(suffix) > 1 else DEFAULT_IMAGE_EXTENSION


def preformatted_text(el: Tag) -> str:
    """Text of a <pre> element with every tag removed and <br> kept as a newline."""
    parts = []
    for node in el.descendants:
        if isinstance(node, Tag):
            if node.name == 'br':
                parts.append('\n')
        elif isinstance(node, NavigableString) and not isinstance(node, Comment):
            parts.append(str(node))
    return ''.join(parts)


class BlogMarkdownConverter(MarkdownConverter):
    """markdownify converter with blog-export specific rules."""

    def __init__(self, context: ImageContext, image_handler, skip_downloads: bool = False,
                 shortcode_size: str = DEFAULT_SHORTCODE_SIZE, **options):
        super().__init__(**options)
        self.context = context
        self.image_handler = image_handler
        self.skip_downloads = skip_downloads
        self.shortcode_size = shortcode_size

    def _shortcode(self, image_path: Path) -> str:
        return IMAGE_SHORTCODE % (image_path.name, self.shortcode_size)

    def convert_pre(self, el, text, *args, **kwargs):
        code = preformatted_text(el).strip('\n')
        return '\n\n```\n%s\n```\n\n' % code

    def convert_img(self, el, text, *args, **kwargs):
        src = el.attrs.get('src') or ''

        if src.startswith(BASE64_PNG_PREFIX):
            payload = NON_BASE64_CHARS.sub('', src[len(BASE64_PNG_PREFIX):])
            image_path = self.context.next_image_path('png')
            self.image_handler.save_base64(payload, image_path)
            return self._shortcode(image_path)

        alt = el.attrs.get('alt') or DEFAULT_ALT
        return '![%s](%s)' % (alt, src)

    def convert_a(self, el, text, *args, **kwargs):
        href = el.attrs.get('href') or ''
        try:
            scheme = urlparse(href).scheme
            extension = image_extension(href)
        except ValueError:
            # Malformed URL, e.g. an unbalanced '[' in the host
            return super().convert_a(el, text, *args, **kwargs)

        if el.find('img') is not None and scheme in ('http', 'https') and not self.skip_downloads:
            image_path = self.context.next_image_path(extension)
            self.image_handler.download(href, image_path)
            return self._shortcode(image_path)

        return super().convert_a(el, text, *args, **kwargs)


class HtmlToMarkdown:
    """Converts HTML fragments to Markdown for a given post."""

    def __init__(self, image_handler, skip_downloads: bool = False,
                 shortcode_size: Optional[str] = None):
        self.image_handler = image_handler
        self.skip_downloads = skip_downloads
        self.shortcode_size = shortcode_size or DEFAULT_SHORTCODE_SIZE

    def convert(self, html: str, context: ImageContext) -> str:
        """Convert an HTML fragment; images are named after context.post_path."""
        if not html:
            return ''

        converter = BlogMarkdownConverter(
            context=context,
            image_handler=self.image_handler,
            skip_downloads=self.skip_downloads,
            shortcode_size=self.shortcode_size,
            heading_style=ATX,
            bullets='-',
        )
        return converter.convert(html).strip()
