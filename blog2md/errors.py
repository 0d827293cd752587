"""
Error types raised while importing a blog export.
"""


class Blog2MdError(Exception):
    """Base class for blog2md errors."""


class ExportParseError(Blog2MdError, ValueError):
    """The export file could not be read or is not the expected format."""


class OrphanCommentError(Blog2MdError):
    """A comment references a post that is not in the export."""

    def __init__(self, post_id: str, comment_id: str = ''):
        self.post_id = post_id
        self.comment_id = comment_id
        super().__init__(f"No post with id '{post_id}' for comment '{comment_id or '?'}'")
