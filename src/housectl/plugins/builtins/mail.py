"""Built-in mail plugin — delivers house invite notices over SMTP.

Disabled by default: when ``[notify] enabled = false`` the notice is
only logged. SMTP failures propagate so the event bus can mark the
outbox row as failed; they never reach the membership operation.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

import pluggy

from housectl.config.models import NotifyConfig

hookimpl = pluggy.HookimplMarker("housectl")

logger = logging.getLogger(__name__)

_SUBJECT = "You were added to {house_name}"
_BODY = """\
Hi {to_name},

{inviter_name} added you to the house "{house_name}".

-- housectl
"""


class MailPlugin:
    """SMTP delivery of ``send_house_invite_notice``."""

    def __init__(self, config: NotifyConfig | None = None) -> None:
        self._config = config or NotifyConfig()

    @hookimpl
    def send_house_invite_notice(
        self,
        to_email: str,
        to_name: str,
        house_name: str,
        inviter_name: str,
    ) -> None:
        message = self.build_message(
            to_email=to_email,
            to_name=to_name,
            house_name=house_name,
            inviter_name=inviter_name,
        )
        if not self._config.enabled:
            logger.info("Mail disabled; invite notice for %s not sent", to_email)
            return
        self._send(message)

    def build_message(
        self,
        *,
        to_email: str,
        to_name: str,
        house_name: str,
        inviter_name: str,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._config.sender
        message["To"] = to_email
        message["Subject"] = _SUBJECT.format(house_name=house_name)
        message.set_content(
            _BODY.format(to_name=to_name, inviter_name=inviter_name, house_name=house_name)
        )
        return message

    def _send(self, message: EmailMessage) -> None:
        cfg = self._config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout) as smtp:
            if cfg.use_tls:
                smtp.starttls()
            if cfg.username and cfg.password:
                smtp.login(cfg.username, cfg.password)
            smtp.send_message(message)
        logger.debug("Invite notice sent to %s", message["To"])
