import json
from pathlib import Path

import pytest

from clubthreads.core.exceptions import PostDataError, TopicNotFoundError
from clubthreads.models.schemas import Post
from clubthreads.repositories.post_repository import PostRepository


def _write_topic(repo: PostRepository, topic_id: str, rows) -> Path:
    path = repo.get_topic_path(topic_id)
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


def test_missing_topic_raises(tmp_path: Path):
    repo = PostRepository(tmp_path)

    with pytest.raises(TopicNotFoundError) as exc_info:
        repo.get_discussion_posts("nope")
    assert exc_info.value.topic_id == "nope"


def test_rows_sorted_by_created_at_and_aliases_accepted(tmp_path: Path):
    repo = PostRepository(tmp_path)
    _write_topic(
        repo,
        "t1",
        [
            {
                "id": "late",
                "parent_post_id": "early",
                "user_id": "u2",
                "content": "reply",
                "created_at": "2025-03-02T10:00:00+00:00",
                "is_deleted": None,
                "deleted_by_moderator": None,
            },
            {
                "id": "early",
                "parent_post_id": None,
                "user_id": "u1",
                "content": "first",
                "created_at": "2025-03-01T10:00:00+00:00",
            },
        ],
    )

    posts = repo.get_discussion_posts("t1")

    assert [p.id for p in posts] == ["early", "late"]
    assert posts[1].parent_id == "early"
    assert posts[1].author_id == "u2"
    assert posts[1].is_deleted is False


def test_equal_timestamps_keep_file_order(tmp_path: Path):
    repo = PostRepository(tmp_path)
    stamp = "2025-03-01T10:00:00+00:00"
    _write_topic(
        repo,
        "t1",
        [
            {"id": "b", "content": "", "created_at": stamp},
            {"id": "a", "content": "", "created_at": stamp},
            {"id": "no-time", "content": ""},
        ],
    )

    posts = repo.get_discussion_posts("t1")

    assert [p.id for p in posts] == ["no-time", "b", "a"]


def test_invalid_json_raises_post_data_error(tmp_path: Path):
    repo = PostRepository(tmp_path)
    repo.get_topic_path("t1").write_text("{not json", encoding="utf-8")

    with pytest.raises(PostDataError):
        repo.get_discussion_posts("t1")


def test_invalid_record_raises_with_validation_errors(tmp_path: Path):
    repo = PostRepository(tmp_path)
    _write_topic(repo, "t1", [{"content": "missing id"}])

    with pytest.raises(PostDataError) as exc_info:
        repo.get_discussion_posts("t1")
    assert exc_info.value.validation_errors
    assert exc_info.value.validation_errors[0]["loc"] == (0, "id")


def test_save_then_load(tmp_path: Path):
    repo = PostRepository(tmp_path)
    posts = [
        Post(id="a", content="hi", created_at="2025-01-01T00:00:00+00:00"),
        Post(id="b", parent_id="a", content="yo", created_at="2025-01-02T00:00:00+00:00"),
    ]

    path = repo.save_discussion_posts("t1", posts)

    assert Path(path).exists()
    assert not Path(path).with_suffix(".tmp").exists()
    loaded = repo.get_discussion_posts("t1")
    assert [p.model_dump() for p in loaded] == [p.model_dump() for p in posts]


def test_topic_id_cannot_escape_topics_dir(tmp_path: Path):
    repo = PostRepository(tmp_path)

    path = repo.get_topic_path("../../etc/passwd")

    assert path.parent == repo.topics_dir
