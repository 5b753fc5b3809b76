"""Observability: structured logging and metrics.

structlog for logging and Prometheus for metrics.
"""
