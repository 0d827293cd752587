"""
Blog export to Markdown converter

A Python tool for converting Blogger and WordPress exports to Markdown files with frontmatter.
"""

from .parser import ExportParser
from .blogger import BloggerExtractor
from .wordpress import WordPressExtractor
from .markdown import HtmlToMarkdown, ImageContext
from .image_handler import ImageHandler
from .writer import OutputWriter

__all__ = [
    'ExportParser',
    'BloggerExtractor',
    'WordPressExtractor',
    'HtmlToMarkdown',
    'ImageContext',
    'ImageHandler',
    'OutputWriter'
]
