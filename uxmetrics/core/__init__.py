"""Core module — lightweight re-exports only."""

from uxmetrics.core.logging import analysis_scope, get_analysis_context, observation_scope, setup_logging

__all__ = [
    "analysis_scope",
    "get_analysis_context",
    "observation_scope",
    "setup_logging",
]
