"""Coordinators - Orchestration layer connecting the command line with persistence and services."""

from .page_ingestion_coordinator import IngestionResult, PageIngestionCoordinator, PendingPage
from .reading_flow_controller import ReadingFlowController, ReadingPhase, ReadingState
from .training_session import (
    CardPhase,
    NoMatchingVocabularyError,
    TrainingConfig,
    TrainingSession,
    TrainingSessionEngine,
)

__all__ = [
    "PageIngestionCoordinator",
    "IngestionResult",
    "PendingPage",
    "ReadingFlowController",
    "ReadingPhase",
    "ReadingState",
    "TrainingSessionEngine",
    "TrainingSession",
    "TrainingConfig",
    "CardPhase",
    "NoMatchingVocabularyError",
]
