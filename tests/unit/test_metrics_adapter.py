from prometheus_client import REGISTRY

from clubthreads.observability.metrics_adapter import (
    NoopMetricsAdapter,
    PrometheusMetricsAdapter,
)


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_noop_metrics_adapter_methods_do_nothing():
    m = NoopMetricsAdapter()
    m.observe_build(
        orphan_policy="drop", duration_seconds=0.01, post_count=3, dropped_count=1
    )
    m.inc_collapse_reset()
    m.inc_collapse_reset_failed("SessionStoreError")


def test_prometheus_adapter_counts_builds_and_resets(monkeypatch):
    monkeypatch.setenv("HOSTNAME", "test-worker")
    m = PrometheusMetricsAdapter()
    builds_before = _sample(
        "threads_built_total", orphan_policy="promote", worker="test-worker"
    )
    posts_before = _sample("thread_posts_total", worker="test-worker")
    resets_before = _sample("collapse_resets_total", worker="test-worker")

    m.observe_build(
        orphan_policy="promote", duration_seconds=0.002, post_count=10, dropped_count=0
    )
    m.inc_collapse_reset()
    m.inc_collapse_reset_failed("RuntimeError")

    assert (
        _sample("threads_built_total", orphan_policy="promote", worker="test-worker")
        == builds_before + 1
    )
    assert _sample("thread_posts_total", worker="test-worker") == posts_before + 10
    assert _sample("collapse_resets_total", worker="test-worker") == resets_before + 1
