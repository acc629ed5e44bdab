"""Helpers for rendering a threaded discussion.

Indentation is capped so deep reply chains stay readable: depth is first
clamped to ``max_depth`` and the visual indent to ``max_indent`` levels.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator

from clubthreads.models.schemas import Post, ThreadedPost

DELETED_PLACEHOLDER = "This comment was deleted"
MODERATOR_REMOVED_PLACEHOLDER = "This comment was removed by a moderator"

DEFAULT_MAX_DEPTH = 8
DEFAULT_MAX_INDENT = 3
INDENT_STEP_PX = 16


def display_content(post: Post) -> str:
    """Return the text to show for a post, hiding soft-deleted content."""
    if post.deleted_by_moderator:
        return MODERATOR_REMOVED_PLACEHOLDER
    if post.is_deleted:
        return DELETED_PLACEHOLDER
    return post.content


def effective_depth(post: ThreadedPost, max_depth: int = DEFAULT_MAX_DEPTH) -> int:
    return min(post.depth, max_depth)


def indent_level(
    post: ThreadedPost,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_indent: int = DEFAULT_MAX_INDENT,
) -> int:
    return min(effective_depth(post, max_depth), max_indent)


def indentation_width(
    post: ThreadedPost,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_indent: int = DEFAULT_MAX_INDENT,
    step_px: int = INDENT_STEP_PX,
) -> int:
    """Left margin in pixels for a post."""
    return indent_level(post, max_depth, max_indent) * step_px


def has_deep_replies(post: ThreadedPost) -> bool:
    """True if any direct reply has replies of its own."""
    return any(reply.replies for reply in post.replies)


def reply_count_label(count: int) -> str:
    return f"{count} {'reply' if count == 1 else 'replies'}"


def visible_posts(
    forest: Iterable[ThreadedPost], collapsed_ids: Collection[str] = ()
) -> Iterator[ThreadedPost]:
    """Yield posts in display order, skipping replies under collapsed posts.

    A collapsed post itself is still yielded; only its subtree is hidden.
    """
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        yield node
        if node.id not in collapsed_ids:
            stack.extend(reversed(node.replies))


def render_text(
    forest: Iterable[ThreadedPost],
    collapsed_ids: Collection[str] = (),
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_indent: int = DEFAULT_MAX_INDENT,
) -> str:
    """Render a forest as indented plain text, two spaces per indent level."""
    lines: list[str] = []
    for node in visible_posts(forest, collapsed_ids):
        pad = "  " * indent_level(node, max_depth, max_indent)
        author = node.author_id or "unknown"
        stamp = node.created_at.isoformat() if node.created_at else "-"
        lines.append(f"{pad}- [{node.id}] {author} @ {stamp}")
        for text_line in display_content(node).splitlines() or [""]:
            lines.append(f"{pad}  {text_line}")
        if node.replies and node.id in collapsed_ids:
            lines.append(f"{pad}  [+] {reply_count_label(node.reply_count)} hidden")
    return "\n".join(lines)
