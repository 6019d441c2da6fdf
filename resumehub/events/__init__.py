"""
Domain events and the bus that delivers them.
"""
from resumehub.events.analysis import AnalysisCompleted
from resumehub.events.auth import LoginFailed, LoginSucceeded, Lockout
from resumehub.events.bus import CancellationToken, DeliveryCancelled, Dispatch, EventBus

__all__ = [
    "AnalysisCompleted",
    "CancellationToken",
    "DeliveryCancelled",
    "Dispatch",
    "EventBus",
    "LoginFailed",
    "LoginSucceeded",
    "Lockout",
]
