import logging
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from resumehub.events import (
    AnalysisCompleted,
    CancellationToken,
    DeliveryCancelled,
    EventBus,
    LoginFailed,
    LoginSucceeded,
    Lockout,
)
from resumehub.listeners import register_listeners
from resumehub.listeners.analysis import SendAnalysisCompleteNotification
from resumehub.listeners.login import LoginEventListener
from resumehub.models.analysis_result import AnalysisResult
from resumehub.models.resume import Resume
from resumehub.services.notifications import LoggingNotificationService


@pytest.fixture
def event():
    resume = Resume(id="r1", user_id="u1", tenant_id="t1", filename="cv.pdf", original_filename="cv.pdf")
    result = AnalysisResult(id="a1", resume_id="r1", overall_score=82)
    return AnalysisCompleted(resume=resume, analysis_result=result)


def test_notifies_resume_owner(event):
    service = Mock()
    service.send_analysis_complete.return_value = True

    SendAnalysisCompleteNotification(service).handle(event, CancellationToken())

    service.send_analysis_complete.assert_called_once_with("u1", event.resume, event.analysis_result)


def test_cancelled_delivery_sends_nothing(event):
    service = Mock()
    token = CancellationToken()
    token.cancel()

    with pytest.raises(DeliveryCancelled):
        SendAnalysisCompleteNotification(service).handle(event, token)

    service.send_analysis_complete.assert_not_called()


def test_unsent_notification_is_logged(event, caplog):
    service = Mock()
    service.send_analysis_complete.return_value = False

    with caplog.at_level(logging.WARNING, logger="resumehub.listeners.analysis"):
        SendAnalysisCompleteNotification(service).handle(event, CancellationToken())

    assert "was not sent" in caplog.text


def test_logging_notification_service_reports_grade(event, caplog):
    with caplog.at_level(logging.INFO, logger="resumehub.services.notifications"):
        sent = LoggingNotificationService().send_analysis_complete("u1", event.resume, event.analysis_result)

    assert sent is True
    record = caplog.records[-1]
    assert record.user_id == "u1"
    assert record.resume_id == "r1"
    assert record.grade == "A-"


def test_successful_login_is_audited(caplog):
    event = LoginSucceeded(user_id="u1", tenant_id="t1", email="ada@example.com", ip_address="10.0.0.1")

    with caplog.at_level(logging.INFO, logger="resumehub.listeners.login"):
        LoginEventListener().handle_login(event, CancellationToken())

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.event_type == "login_succeeded"
    assert record.security_event is True
    assert record.ip_address == "10.0.0.1"


def test_failed_login_for_unknown_email(caplog):
    event = LoginFailed(tenant_id="t1", email="nobody@example.com")

    with caplog.at_level(logging.WARNING, logger="resumehub.listeners.login"):
        LoginEventListener().handle_failed_login(event, CancellationToken())

    record = caplog.records[-1]
    assert record.event_type == "login_failed"
    assert record.reason == "unknown_email"
    assert not hasattr(record, "login_attempts")


def test_failed_login_for_known_user(caplog):
    event = LoginFailed(tenant_id="t1", email="ada@example.com", user_id="u1", login_attempts=3)

    with caplog.at_level(logging.WARNING, logger="resumehub.listeners.login"):
        LoginEventListener().handle_failed_login(event, CancellationToken())

    record = caplog.records[-1]
    assert record.login_attempts == 3
    assert record.is_locked is False


def test_lockout_is_audited(caplog):
    locked_until = datetime(2030, 1, 1, 12, 0)
    event = Lockout(tenant_id="t1", email="ada@example.com", user_id="u1", locked_until=locked_until)

    with caplog.at_level(logging.WARNING, logger="resumehub.listeners.login"):
        LoginEventListener().handle_lockout(event, CancellationToken())

    record = caplog.records[-1]
    assert record.event_type == "account_locked"
    assert record.locked_until == locked_until.isoformat()


def test_register_listeners_wires_every_event():
    bus = EventBus(max_workers=1)
    try:
        register_listeners(bus, Mock())

        assert len(bus.listeners_for(AnalysisCompleted)) == 1
        assert len(bus.listeners_for(LoginSucceeded)) == 1
        assert len(bus.listeners_for(LoginFailed)) == 1
        assert len(bus.listeners_for(Lockout)) == 1
    finally:
        bus.shutdown()


def test_analysis_event_reaches_notifier_through_bus(event):
    bus = EventBus(max_workers=1)
    service = Mock()
    service.send_analysis_complete.return_value = True
    register_listeners(bus, service)

    dispatch = bus.dispatch(event)

    assert dispatch.wait(timeout=5)
    bus.shutdown()
    service.send_analysis_complete.assert_called_once()


def test_event_payload_is_never_modified(event):
    snapshot = SimpleNamespace(user_id=event.resume.user_id, score=event.analysis_result.overall_score)
    service = Mock()
    service.send_analysis_complete.return_value = True

    SendAnalysisCompleteNotification(service).handle(event, CancellationToken())

    assert event.resume.user_id == snapshot.user_id
    assert event.analysis_result.overall_score == snapshot.score
