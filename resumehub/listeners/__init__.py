"""
Event-to-listener wiring.

register_listeners() is the single place that connects event types to
listeners; main.create_app() calls it once with the application's bus.
"""
from resumehub.events import AnalysisCompleted, EventBus, LoginFailed, LoginSucceeded, Lockout
from resumehub.listeners.analysis import SendAnalysisCompleteNotification
from resumehub.listeners.login import LoginEventListener
from resumehub.services.notifications import NotificationService


def register_listeners(bus: EventBus, notification_service: NotificationService) -> None:
    bus.subscribe(AnalysisCompleted, SendAnalysisCompleteNotification(notification_service).handle)

    login_listener = LoginEventListener()
    bus.subscribe(LoginSucceeded, login_listener.handle_login)
    bus.subscribe(LoginFailed, login_listener.handle_failed_login)
    bus.subscribe(Lockout, login_listener.handle_lockout)
