"""Content mutation pipeline: lookup, gates, compensation and orchestration."""

from contentstudio.pipeline.orchestrator import MutationOrchestrator

__all__ = ["MutationOrchestrator"]
