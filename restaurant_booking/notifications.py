import logging

from fastapi import BackgroundTasks
from fastapi_mail import FastMail, MessageSchema

logger = logging.getLogger(__name__)


class MailNotifier:
    """Queues booking emails to go out after the response has been sent.

    ``send_async`` only schedules delivery on the request's background tasks;
    delivery errors are logged and dropped.
    """

    def __init__(self, mail: FastMail, background_tasks: BackgroundTasks):
        self.mail = mail
        self.background_tasks = background_tasks

    def send_async(self, recipient: str, subject: str, body: str) -> None:
        self.background_tasks.add_task(self._deliver, recipient, subject, body)

    async def _deliver(self, recipient: str, subject: str, body: str) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[recipient],
            body=body,
            subtype="html"
        )
        try:
            await self.mail.send_message(message)
        except Exception as e:
            logger.warning("Email '%s' to %s not sent: %s", subject, recipient, e)
            return
        logger.info("Email '%s' sent to %s", subject, recipient)


def notify(notifier, recipient: str, subject: str, body: str) -> None:
    """Hand an email to the notifier without letting any failure escape."""
    if not recipient:
        logger.warning("Email '%s' skipped: no recipient", subject)
        return
    try:
        notifier.send_async(recipient, subject, body)
    except Exception:
        logger.exception("Could not queue email '%s' to %s", subject, recipient)
