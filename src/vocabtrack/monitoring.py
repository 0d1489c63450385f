"""Monitoring configuration for the progress tracker."""
from prometheus_client import Counter, Histogram, start_http_server

# Practice metrics
practice_events = Counter(
    "vocabtrack_practice_events_total",
    "Total number of word practice events recorded",
    ["mode", "result"],
)

chapter_completions = Counter(
    "vocabtrack_chapter_completions_total",
    "Total number of chapter completion recomputations that were persisted",
    ["mode"],
)

# Analysis metrics
analyses_generated = Counter(
    "vocabtrack_analyses_generated_total",
    "Total number of daily analysis reports generated",
)

analysis_duration = Histogram(
    "vocabtrack_analysis_duration_seconds",
    "Duration of daily analysis generation in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)

# Store metrics
store_operations = Counter(
    "vocabtrack_store_operations_total",
    "Total number of key-value store operations",
    ["operation_type"],
)

store_errors = Counter(
    "vocabtrack_store_errors_total",
    "Total number of key-value store errors",
    ["error_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
