from clubthreads.core.exceptions import (
    ClubThreadsError,
    PostDataError,
    SessionStoreError,
    TopicNotFoundError,
)


def test_base_error_attributes():
    err = ClubThreadsError("oops", correlation_id="cid-1")
    assert str(err) == "oops"
    assert err.correlation_id == "cid-1"


def test_topic_not_found_holds_topic():
    err = TopicNotFoundError("missing", "t-9", correlation_id="c2")
    assert isinstance(err, ClubThreadsError)
    assert err.topic_id == "t-9"
    assert err.correlation_id == "c2"


def test_post_data_error_list_attached():
    err = PostDataError("bad data", validation_errors=[{"loc": ("id",)}])
    assert err.validation_errors == [{"loc": ("id",)}]
    assert PostDataError("bad").validation_errors == []


def test_session_store_error_operation():
    err = SessionStoreError("redis down", "scan")
    assert err.operation == "scan"
    assert err.correlation_id is None
