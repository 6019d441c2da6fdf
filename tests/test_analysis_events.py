from datetime import datetime
from unittest.mock import Mock

import pytest

from resumehub.core.exceptions import PreconditionError
from resumehub.events import AnalysisCompleted
from resumehub.models.analysis_result import AnalysisResult, grade_for_score
from resumehub.models.resume import Resume
from resumehub.services.analysis import AnalysisService
from tests.factories import make_analysis, make_resume


def test_event_requires_resume():
    with pytest.raises(PreconditionError):
        AnalysisCompleted(resume=None, analysis_result=AnalysisResult(overall_score=50))


def test_event_requires_analysis_result():
    with pytest.raises(PreconditionError):
        AnalysisCompleted(resume=Resume(), analysis_result=None)


def test_event_is_immutable():
    event = AnalysisCompleted(resume=Resume(), analysis_result=AnalysisResult(overall_score=50))
    with pytest.raises(AttributeError):
        event.resume = None


@pytest.mark.parametrize("score,grade", [
    (100, "A+"),
    (90, "A+"),
    (89, "A"),
    (80, "A-"),
    (72, "B"),
    (55, "C"),
    (40, "D"),
    (39, "F"),
    (0, "F"),
])
def test_grade_for_score(score, grade):
    assert grade_for_score(score) == grade


def test_complete_records_result_and_dispatches_once(db, ada):
    bus = Mock()
    resume = make_resume(db, ada)

    result = AnalysisService(bus).complete(db, resume, {"overall_score": 77, "ats_score": 70})

    assert result.id is not None
    assert resume.analysis_status == "completed"
    bus.dispatch.assert_called_once()
    event = bus.dispatch.call_args.args[0]
    assert isinstance(event, AnalysisCompleted)
    assert event.resume is resume
    assert event.analysis_result is result


def test_latest_returns_newest_result(db, ada):
    resume = make_resume(db, ada)
    make_analysis(db, resume, 60, created_at=datetime(2026, 1, 1))
    newest = make_analysis(db, resume, 75, created_at=datetime(2026, 2, 1))

    assert AnalysisService(Mock()).latest(db, resume).id == newest.id
