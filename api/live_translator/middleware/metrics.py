from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

PTT_REQUESTS = Counter(
    "live_translator_ptt_requests_total",
    "Push-to-talk pipeline runs",
    ["outcome"],
)

PIPELINE_STAGE_DURATION = Histogram(
    "live_translator_pipeline_stage_duration_seconds",
    "Pipeline stage duration",
    ["stage"],
    buckets=[0.05, 0.1, 0.2, 0.3, 0.5, 1.0, 2.0, 5.0],
)

PIPELINE_TOTAL_DURATION = Histogram(
    "live_translator_pipeline_total_duration_seconds",
    "Request entry to response assembly",
    buckets=[0.25, 0.5, 0.75, 1.0, 1.5, 2.0, 3.0, 5.0, 10.0],
)

PIPELINE_FAILURES = Counter(
    "live_translator_pipeline_failures_total",
    "Pipeline failures by stage and error kind",
    ["stage", "error"],
)

UPSTREAM_ERRORS = Counter(
    "live_translator_upstream_errors_total",
    "Non-success responses and transport failures from upstream services",
    ["service", "status"],
)


def setup_metrics(app):
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/docs", "/openapi.json"],
    ).instrument(app).expose(app, endpoint="/metrics")
