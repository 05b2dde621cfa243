"""Prometheus metrics definitions for Thali."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "thali_http_requests_total",
    "Total number of HTTP requests processed by the Thali API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "thali_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Thali API",
    ["method", "path"],
)

LLM_REQUESTS = Counter(
    "thali_llm_requests_total",
    "Chat completion calls by operation and outcome",
    ["operation", "outcome"],
)

SUGGESTION_FALLBACKS = Counter(
    "thali_suggestion_fallbacks_total",
    "Suggestion requests answered from the curated fallback set",
    ["reason"],
)

SHOPPING_ITEMS_DERIVED = Counter(
    "thali_shopping_items_derived_total",
    "Shopping list entries created from planned meals",
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "LLM_REQUESTS",
    "SUGGESTION_FALLBACKS",
    "SHOPPING_ITEMS_DERIVED",
]
