"""Transactional e-mail rendered from Jinja2 templates and sent over SMTP."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from catalog.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class Mailer:
    """Renders ``subject``, ``plain_body`` and ``html_body`` blocks of a template.

    Sending is blocking ``smtplib`` work, so it runs in a worker thread and is
    retried a few times before giving up.
    """

    def __init__(
        self,
        config: Settings | None = None,
        templates_dir: Path | None = None,
        attempts: int = 3,
        retry_delay: float = 0.5,
    ) -> None:
        self.config = config or default_settings
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=True,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, data: dict[str, Any]) -> EmailMessage:
        template = self.env.get_template(template_name)
        context = template.new_context(data)

        def block(name: str) -> str:
            return "".join(template.blocks[name](context)).strip()

        message = EmailMessage()
        message["From"] = self.config.smtp_sender
        message["Subject"] = block("subject")
        message.set_content(block("plain_body"))
        message.add_alternative(block("html_body"), subtype="html")
        return message

    async def send(self, recipient: str, template_name: str, data: dict[str, Any]) -> None:
        message = self.render(template_name, data)
        message["To"] = recipient

        retrying = AsyncRetrying(
            retry=retry_if_exception_type((smtplib.SMTPException, OSError)),
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.retry_delay),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await asyncio.to_thread(self._deliver, message)
        logger.info("Sent %s e-mail", template_name)

    def _deliver(self, message: EmailMessage) -> None:
        cfg = self.config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.smtp_timeout) as smtp:
            if cfg.smtp_starttls:
                smtp.starttls()
            if cfg.smtp_username:
                smtp.login(cfg.smtp_username, cfg.smtp_password)
            smtp.send_message(message)
