"""
Login audit listener.

Writes security log records for login lifecycle events. Lockout decisions are
made by the login endpoint; this listener only records what happened.
"""
import logging

from resumehub.events import CancellationToken, LoginFailed, LoginSucceeded, Lockout
from resumehub.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)


class LoginEventListener:

    def handle_login(self, event: LoginSucceeded, token: CancellationToken) -> None:
        log_security_event(
            "login_succeeded",
            {
                "user_id": event.user_id,
                "tenant_id": event.tenant_id,
                "email": event.email,
                "ip_address": event.ip_address,
                "user_agent": event.user_agent,
                "timestamp": event.occurred_at.isoformat(),
            },
            logger,
            level=logging.INFO
        )

    def handle_failed_login(self, event: LoginFailed, token: CancellationToken) -> None:
        details = {
            "tenant_id": event.tenant_id,
            "email": event.email,
            "ip_address": event.ip_address,
            "user_agent": event.user_agent,
            "timestamp": event.occurred_at.isoformat(),
        }
        if event.user_id is None:
            details["reason"] = "unknown_email"
        else:
            details.update({
                "user_id": event.user_id,
                "login_attempts": event.login_attempts,
                "is_locked": event.is_locked,
            })
        log_security_event("login_failed", details, logger)

    def handle_lockout(self, event: Lockout, token: CancellationToken) -> None:
        log_security_event(
            "account_locked",
            {
                "tenant_id": event.tenant_id,
                "user_id": event.user_id,
                "email": event.email,
                "locked_until": event.locked_until.isoformat() if event.locked_until else None,
                "ip_address": event.ip_address,
                "user_agent": event.user_agent,
                "timestamp": event.occurred_at.isoformat(),
            },
            logger
        )
