"""SMTP delivery of sync reports.

Mailer sends plain-text messages through smtplib (implicit TLS on port 465,
otherwise optional STARTTLS). EmailReporter implements the reporter
interface consumed by the batch orchestrator and sends the daily summary.
"""

import logging
import mimetypes
import os
import smtplib
from email.message import EmailMessage
from typing import Callable, List, Optional

from src.config.models import AppConfig, EmailConfig
from src.sync_engine.models import BatchSummary
from .errors import ReportError
from .report_formatter import collect_today_log_lines, format_daily_report, format_sync_report

logger = logging.getLogger(__name__)

SMTP_SSL_PORT = 465

# SMTP connection timeout in seconds
SMTP_TIMEOUT = 30


class Mailer:
    """Sends plain-text emails with optional file attachments.

    Example:
        >>> mailer = Mailer(config.email)
        >>> mailer.send("Fork Sync Report", "All good", attachments=["fork-sync.log"])
    """

    def __init__(
        self,
        email_config: EmailConfig,
        smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None,
        timeout: int = SMTP_TIMEOUT,
    ):
        """Initialize mailer.

        Args:
            email_config: SMTP settings
            smtp_factory: Connection factory (SMTP_SSL on port 465, SMTP otherwise)
            timeout: Connection timeout in seconds
        """
        self.config = email_config
        self.timeout = timeout
        if smtp_factory is None:
            smtp_factory = smtplib.SMTP_SSL if email_config.smtp_port == SMTP_SSL_PORT else smtplib.SMTP
        self._smtp_factory = smtp_factory

    def build_message(self, subject: str, body: str, attachments: Optional[List[str]] = None) -> EmailMessage:
        message = EmailMessage()
        message['Subject'] = subject
        message['From'] = self.config.from_address
        message['To'] = ', '.join(self.config.to)
        message.set_content(body)

        for path in attachments or []:
            content_type, _ = mimetypes.guess_type(path)
            maintype, subtype = (content_type or 'text/plain').split('/', 1)
            try:
                with open(path, 'rb') as f:
                    data = f.read()
            except OSError as e:
                logger.warning(f"Could not attach {path}: {e}")
                continue
            message.add_attachment(data, maintype=maintype, subtype=subtype, filename=os.path.basename(path))

        return message

    def send(self, subject: str, body: str, attachments: Optional[List[str]] = None) -> None:
        """Send one email.

        Raises:
            ReportError: If no recipients are configured or SMTP delivery fails
        """
        if not self.config.to:
            raise ReportError("no recipients configured")

        message = self.build_message(subject, body, attachments)
        recipients = ', '.join(self.config.to)
        logger.info(f"Sending email with subject: \"{subject}\" to: {recipients}")

        try:
            with self._smtp_factory(self.config.smtp_host, self.config.smtp_port, timeout=self.timeout) as smtp:
                if self.config.use_tls and self.config.smtp_port != SMTP_SSL_PORT:
                    smtp.starttls()
                if self.config.user:
                    smtp.login(self.config.user, self.config.password or '')
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise ReportError(f"{type(e).__name__}: {e}")

        logger.info("Email sent successfully")


class EmailReporter:
    """Mails batch summaries and the daily log summary.

    Example:
        >>> reporter = EmailReporter(config)
        >>> orchestrator = BatchOrchestrator(config, reporter=reporter)
    """

    def __init__(self, config: AppConfig, mailer: Optional[Mailer] = None):
        if config.email is None and mailer is None:
            raise ReportError("email is not configured")
        self.config = config
        self.mailer = mailer or Mailer(config.email)

    def _attachments(self, config: AppConfig) -> List[str]:
        log_file = config.log_options.output_file
        if not log_file:
            return []
        log_file = os.path.abspath(log_file)
        if not os.path.isfile(log_file):
            logger.warning(f"Log file {log_file} not found for attachment")
            return []
        logger.info(f"Attaching log file: {log_file} to the report")
        return [log_file]

    def report(self, config: AppConfig, summary: BatchSummary) -> None:
        """Send the report for one batch.

        Raises:
            ReportError: If delivery fails
        """
        subject, body = format_sync_report(summary)
        self.mailer.send(subject, body, self._attachments(config))

    def send_daily_report(self, config: Optional[AppConfig] = None) -> bool:
        """Mail today's log lines.

        Returns:
            False when daily reports are disabled, True when the email was sent

        Raises:
            ReportError: If delivery fails
        """
        config = config or self.config
        if not config.send_daily_report:
            logger.info("Daily report sending not enabled. Skipping daily report")
            return False

        lines: Optional[List[str]] = []
        if config.log_options.output_file:
            try:
                lines = collect_today_log_lines(config.log_options.output_file)
            except OSError as e:
                logger.error(f"Failed to retrieve logs for daily report: {e}")
                lines = None

        subject, body = format_daily_report(lines)
        self.mailer.send(subject, body, self._attachments(config))
        return True
