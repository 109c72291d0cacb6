"""
Outbound email adapter.

Real delivery is an external collaborator; the default backend only logs
what would have been sent so the surrounding flows stay observable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import Flask, current_app

logger = logging.getLogger(__name__)


class MailerError(RuntimeError):
    pass


class Mailer:
    def send(self, *, to: str, subject: str, html: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class LogMailer(Mailer):
    sender: str

    def send(self, *, to: str, subject: str, html: str) -> bool:
        logger.info("MAIL from=%s to=%s subject=%r bytes=%d", self.sender, to, subject, len(html or ""))
        return True


def mailer_from_config(config: dict) -> Mailer:
    backend = (config.get("MAIL_BACKEND") or "log").strip().lower()
    if backend != "log":
        raise MailerError(f"Unsupported MAIL_BACKEND: {backend}")
    return LogMailer(sender=config.get("MAIL_FROM") or "")


def get_mailer(app: Flask | None = None) -> Mailer:
    app = app or current_app
    return app.extensions["mailer"]
