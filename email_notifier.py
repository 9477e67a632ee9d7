import logging
import requests

from config import MailConfig
from mail_log import MailLog
from models import Application, Job

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """The email API did not accept a message"""


class EmailNotifier:
    """Sends applicant emails through EmailJS templates.

    When any of the four EmailJS identifiers is missing nothing is sent; the
    message is logged instead. Every attempt is written to the mail log and
    no failure ever propagates to the caller.
    """

    def __init__(self, config: MailConfig, mail_log: MailLog):
        self.config = config
        self.mail_log = mail_log

    @property
    def configured(self) -> bool:
        return self.config.configured

    def send_template(self, template_id, template_params):
        """POST one templated message to EmailJS. Raises NotificationError on failure."""
        if not self.configured:
            raise NotificationError('EmailJS not configured.')

        payload = {
            'service_id': self.config.service_id,
            'template_id': template_id,
            'user_id': self.config.user_id,
            'template_params': template_params,
        }

        try:
            response = requests.post(self.config.api_url, json=payload, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f"EmailJS request error: {e}")
            raise NotificationError(f"EmailJS request failed: {e}") from e

        if not response.ok:
            logger.error(f"EmailJS Response Error ({response.status_code}): {response.text}")
            raise NotificationError(f"EmailJS API failed with status {response.status_code}: {response.text}")

        logger.info("EmailJS Response: Success")
        return True

    def send_confirmation(self, application: Application, job: Job) -> bool:
        """Tell the applicant their application was received"""
        subject = f"Application Received: {job.title}"
        params = {
            'applicant_name': application.name,
            'applicant_email': application.email,
            'job_title': job.title,
            'job_location': job.location,
            'phone_number': application.phone,
            'cover_letter': application.cover,
            'company_email': self.config.company_email,
            # the template's "To Email" is bound to {{email}}
            'email': application.email,
        }

        if not self.configured:
            logger.info(f"Email (not sent) would be: {params}")
            self.mail_log.record(application.email, subject, sent=False, note='EmailJS not configured')
            return False

        try:
            self.send_template(self.config.template_confirm, params)
        except NotificationError as e:
            logger.error(f"Error sending confirmation email to {application.email}: {e}")
            self.mail_log.record(application.email, subject, sent=False, error=str(e))
            return False

        logger.info(f"Confirmation email sent to {application.email} via EmailJS")
        self.mail_log.record(application.email, subject, sent=True, note='EmailJS')
        return True

    def send_rejection(self, application: Application, job_title: str = 'a job') -> bool:
        subject = f"Update on Application for {job_title}"
        params = {
            'applicant_name': application.name,
            'applicant_email': application.email,
            'job_title': job_title,
            'company_email': self.config.company_email,
            'email': application.email,
        }

        if not self.configured:
            logger.info(f"Rejection email (not sent, EmailJS not configured) would be: {params}")
            self.mail_log.record(application.email, subject, sent=False, note='Rejection - not configured')
            return False

        try:
            self.send_template(self.config.template_reject, params)
        except NotificationError as e:
            logger.error(f"Error sending rejection email to {application.email}: {e}")
            self.mail_log.record(application.email, subject, sent=False,
                                 note='EmailJS Rejection error', error=str(e))
            return False

        logger.info(f"Rejection email sent to {application.email} via EmailJS")
        self.mail_log.record(application.email, subject, sent=True, note='EmailJS Rejection')
        return True
