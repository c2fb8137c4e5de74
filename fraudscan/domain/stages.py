"""Per-session pipeline state: stage statuses, generation tagging, single error slot"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple
from fraudscan.domain.models import RawRecord, ProcessedRecord, ScoreResult, FinalRecord
from fraudscan.domain.features import FeatureResult
from fraudscan.domain.merging import merge_results
from fraudscan.domain.exceptions import StageBusyError


class Stage(str, Enum):
    FEATURES = "features"
    SCORING = "scoring"
    PERSISTENCE = "persistence"


class StageStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _idle_statuses() -> Dict[Stage, StageStatus]:
    return {stage: StageStatus.IDLE for stage in Stage}


@dataclass
class AnalysisSession:
    """
    State of one uploaded dataset as it moves through the pipeline.

    Every stage output is an immutable value replaced wholesale. Loading a
    new dataset bumps `generation`; network-bound stages capture the
    generation when they begin and their completion is ignored if the
    dataset has been replaced in the meantime. Saves also capture
    `scores_generation` and are ignored if newer scores have arrived.
    """

    session_id: str
    generation: int = 0
    scores_generation: int = 0
    raw_records: Tuple[RawRecord, ...] = ()
    features: Optional[FeatureResult] = None
    scores: Tuple[ScoreResult, ...] = ()
    error: Optional[str] = None
    info: Optional[str] = None
    statuses: Dict[Stage, StageStatus] = field(default_factory=_idle_statuses)

    @property
    def processed(self) -> Tuple[ProcessedRecord, ...]:
        return self.features.records if self.features else ()

    @property
    def final_records(self) -> List[FinalRecord]:
        # Recomputed on every read so it always reflects the current dataset and scores
        return merge_results(self.processed, self.scores)

    def status(self, stage: Stage) -> StageStatus:
        return self.statuses[stage]

    def is_current(self, generation: int, scores_generation: Optional[int] = None) -> bool:
        if generation != self.generation:
            return False
        return scores_generation is None or scores_generation == self.scores_generation

    def begin(self, stage: Stage) -> int:
        """
        Move a stage to RUNNING and clear the previous error/info message.

        Returns:
            Generation the stage is running against

        Raises:
            StageBusyError: If the stage is already running for this dataset
        """
        if self.statuses[stage] is StageStatus.RUNNING:
            raise StageBusyError(f"{stage.value} is already running for session {self.session_id}")
        self.statuses[stage] = StageStatus.RUNNING
        self.error = None
        self.info = None
        return self.generation

    def _settle(self, stage: Stage, generation: int, scores_generation: Optional[int]) -> bool:
        """Whether a completion may be recorded; releases the stage if only the scores moved on"""
        if generation != self.generation:
            return False
        if not self.is_current(generation, scores_generation):
            self.statuses[stage] = StageStatus.IDLE
            return False
        return True

    def succeed(
        self,
        stage: Stage,
        generation: int,
        info: Optional[str] = None,
        scores_generation: Optional[int] = None,
    ) -> bool:
        if not self._settle(stage, generation, scores_generation):
            return False
        self.statuses[stage] = StageStatus.SUCCEEDED
        self.info = info
        return True

    def fail(self, stage: Stage, generation: int, message: str, scores_generation: Optional[int] = None) -> bool:
        if not self._settle(stage, generation, scores_generation):
            return False
        self.statuses[stage] = StageStatus.FAILED
        self.error = message
        return True

    def load_dataset(self, raw_records: Sequence[RawRecord], features: FeatureResult) -> int:
        """Replace the dataset, discarding scores and superseding in-flight stages"""
        self.generation += 1
        self.raw_records = tuple(raw_records)
        self.features = features
        self.scores = ()
        self.error = None
        self.info = None
        self.statuses = _idle_statuses()
        self.statuses[Stage.FEATURES] = StageStatus.SUCCEEDED
        return self.generation

    def reset(self, error: Optional[str] = None) -> None:
        """Drop all data after a failed upload; no partial state is kept"""
        self.generation += 1
        self.raw_records = ()
        self.features = None
        self.scores = ()
        self.info = None
        self.statuses = _idle_statuses()
        if error is not None:
            self.statuses[Stage.FEATURES] = StageStatus.FAILED
        self.error = error

    def record_scores(self, generation: int, scores: Sequence[ScoreResult], info: Optional[str] = None) -> bool:
        """
        Store scorer output unless the dataset changed while the call was in flight.

        Bumps `scores_generation`, so a save that started against the previous
        scores is ignored when it completes. A save still running keeps its
        busy status.
        """
        if not self.is_current(generation):
            return False
        self.scores = tuple(scores)
        self.scores_generation += 1
        if self.statuses[Stage.PERSISTENCE] is not StageStatus.RUNNING:
            self.statuses[Stage.PERSISTENCE] = StageStatus.IDLE
        return self.succeed(Stage.SCORING, generation, info)
