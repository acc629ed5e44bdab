from clubthreads.models.schemas import ThreadedPost
from clubthreads.services.discussion.presentation import (
    DELETED_PLACEHOLDER,
    MODERATOR_REMOVED_PLACEHOLDER,
    display_content,
    effective_depth,
    has_deep_replies,
    indent_level,
    indentation_width,
    render_text,
    reply_count_label,
    visible_posts,
)
from clubthreads.services.discussion.thread_builder import build_threaded_posts


def _node(post_id, depth=0, replies=None, **kwargs):
    return ThreadedPost(
        id=post_id, content=f"text {post_id}", depth=depth, replies=replies or [], **kwargs
    )


def test_display_content_plain(make_post):
    assert display_content(make_post("A", content="hello")) == "hello"


def test_display_content_deleted_by_author(make_post):
    post = make_post("A", content="secret", is_deleted=True)
    assert display_content(post) == DELETED_PLACEHOLDER


def test_display_content_moderator_wins_over_author_delete(make_post):
    post = make_post("A", content="spam", is_deleted=True, deleted_by_moderator=True)
    assert display_content(post) == MODERATOR_REMOVED_PLACEHOLDER


def test_effective_depth_is_capped():
    assert effective_depth(_node("A", depth=3)) == 3
    assert effective_depth(_node("A", depth=12)) == 8
    assert effective_depth(_node("A", depth=12), max_depth=5) == 5


def test_indent_level_and_width_are_capped():
    assert indent_level(_node("A", depth=0)) == 0
    assert indent_level(_node("A", depth=2)) == 2
    assert indent_level(_node("A", depth=7)) == 3
    assert indentation_width(_node("A", depth=2)) == 32
    assert indentation_width(_node("A", depth=9)) == 48
    assert indentation_width(_node("A", depth=9), step_px=10) == 30


def test_has_deep_replies():
    leaf = _node("C", depth=2)
    child_with_reply = _node("B", depth=1, replies=[leaf])
    assert has_deep_replies(_node("A", replies=[child_with_reply])) is True
    assert has_deep_replies(_node("A", replies=[_node("B", depth=1)])) is False
    assert has_deep_replies(_node("A")) is False


def test_reply_count_label():
    assert reply_count_label(0) == "0 replies"
    assert reply_count_label(1) == "1 reply"
    assert reply_count_label(7) == "7 replies"


def test_visible_posts_hides_subtree_of_collapsed(make_post):
    posts = [
        make_post("A"),
        make_post("B", parent_id="A"),
        make_post("C", parent_id="B"),
        make_post("D"),
        make_post("E", parent_id="D"),
    ]
    forest = build_threaded_posts(posts)

    assert [p.id for p in visible_posts(forest)] == ["A", "B", "C", "D", "E"]
    assert [p.id for p in visible_posts(forest, {"B", "D"})] == ["A", "B", "D"]


def test_render_text_indents_and_marks_collapsed(make_post):
    posts = [
        make_post("A", author_id="ann", content="First!"),
        make_post("B", parent_id="A", author_id="bob", is_deleted=True),
        make_post("C", parent_id="B", author_id="cy", content="still here"),
    ]
    forest = build_threaded_posts(posts)

    expanded = render_text(forest)
    lines = expanded.splitlines()
    assert lines[0] == "- [A] ann @ -"
    assert lines[1] == "  First!"
    assert lines[2] == "  - [B] bob @ -"
    assert lines[3] == f"    {DELETED_PLACEHOLDER}"
    assert lines[4] == "    - [C] cy @ -"

    collapsed = render_text(forest, {"B"})
    assert "[C]" not in collapsed
    assert "[+] 1 reply hidden" in collapsed
