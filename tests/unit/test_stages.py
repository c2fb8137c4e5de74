"""Unit tests for per-session stage tracking"""

import pytest
from fraudscan.domain.models import RawRecord, ScoreResult
from fraudscan.domain.features import compute_features
from fraudscan.domain.stages import AnalysisSession, Stage, StageStatus
from fraudscan.domain.exceptions import StageBusyError


@pytest.fixture
def session() -> AnalysisSession:
    rows = [RawRecord("A", "2024-01", "X", "100") for _ in range(9)] + [RawRecord("A", "2024-01", "X", "5000")]
    s = AnalysisSession(session_id="s1")
    s.load_dataset(rows, compute_features(rows))
    return s


def test_load_dataset_marks_features_succeeded(session: AnalysisSession):
    assert session.generation == 1
    assert session.status(Stage.FEATURES) is StageStatus.SUCCEEDED
    assert session.status(Stage.SCORING) is StageStatus.IDLE
    assert len(session.processed) == 10


def test_begin_twice_is_busy(session: AnalysisSession):
    """Test the same stage cannot overlap itself"""
    session.begin(Stage.PERSISTENCE)

    with pytest.raises(StageBusyError):
        session.begin(Stage.PERSISTENCE)


def test_begin_clears_previous_error(session: AnalysisSession):
    generation = session.begin(Stage.SCORING)
    session.fail(Stage.SCORING, generation, "scorer down")
    assert session.error == "scorer down"

    session.begin(Stage.SCORING)

    assert session.error is None
    assert session.status(Stage.SCORING) is StageStatus.RUNNING


def test_record_scores_updates_results(session: AnalysisSession):
    generation = session.begin(Stage.SCORING)

    assert session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.9, reason="10x")])

    assert session.status(Stage.SCORING) is StageStatus.SUCCEEDED
    assert [r.id for r in session.final_records] == [9]


def test_stale_completion_is_discarded(session: AnalysisSession):
    """Test a re-upload supersedes an in-flight scoring call"""
    generation = session.begin(Stage.SCORING)
    session.load_dataset(session.raw_records, session.features)

    assert not session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.9, reason="")])
    assert not session.fail(Stage.SCORING, generation, "late failure")

    assert session.scores == ()
    assert session.error is None
    assert session.status(Stage.SCORING) is StageStatus.IDLE


def test_new_scores_reset_persistence(session: AnalysisSession):
    generation = session.begin(Stage.SCORING)
    session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.9, reason="")])
    save_generation = session.begin(Stage.PERSISTENCE)
    session.succeed(Stage.PERSISTENCE, save_generation)

    generation = session.begin(Stage.SCORING)
    session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.8, reason="")])

    assert session.status(Stage.PERSISTENCE) is StageStatus.IDLE
    assert session.final_records[0].fraud_score == 0.8


def test_reset_keeps_no_partial_state(session: AnalysisSession):
    session.reset(error="No data found")

    assert session.processed == ()
    assert session.raw_records == ()
    assert session.error == "No data found"
    assert session.status(Stage.FEATURES) is StageStatus.FAILED


def test_scores_arriving_during_save_keep_it_busy(session: AnalysisSession):
    """Test a save in flight stays exclusive and its late completion is ignored"""
    generation = session.begin(Stage.SCORING)
    session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.9, reason="")])

    save_generation = session.begin(Stage.PERSISTENCE)
    scores_generation = session.scores_generation

    generation = session.begin(Stage.SCORING)
    session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.4, reason="")])

    assert session.status(Stage.PERSISTENCE) is StageStatus.RUNNING
    with pytest.raises(StageBusyError):
        session.begin(Stage.PERSISTENCE)

    assert not session.succeed(Stage.PERSISTENCE, save_generation, scores_generation=scores_generation)
    assert session.status(Stage.PERSISTENCE) is StageStatus.IDLE

    # the newer scores can now be saved
    save_generation = session.begin(Stage.PERSISTENCE)
    assert session.succeed(Stage.PERSISTENCE, save_generation, scores_generation=session.scores_generation)
    assert session.status(Stage.PERSISTENCE) is StageStatus.SUCCEEDED


def test_late_save_failure_after_new_scores_is_ignored(session: AnalysisSession):
    generation = session.begin(Stage.SCORING)
    session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.9, reason="")])
    save_generation = session.begin(Stage.PERSISTENCE)
    scores_generation = session.scores_generation

    generation = session.begin(Stage.SCORING)
    session.record_scores(generation, [ScoreResult(id=9, fraud_score=0.4, reason="")])

    assert not session.fail(Stage.PERSISTENCE, save_generation, "timeout", scores_generation)
    assert session.error is None
    assert session.status(Stage.PERSISTENCE) is StageStatus.IDLE
