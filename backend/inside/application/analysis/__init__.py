"""Safety analysis use cases."""

from inside.application.analysis.orchestrator import SafetyAnalysisOrchestrator

__all__ = ["SafetyAnalysisOrchestrator"]
