import os
import logging
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

EMAILJS_URL = 'https://api.emailjs.com/api/v1.0/email/send'


def _env(name: str) -> Optional[str]:
    """Return an environment variable, treating empty strings as unset"""
    value = os.getenv(name, '').strip()
    return value or None


@dataclass
class MailConfig:
    """Identifiers for the EmailJS account used for applicant notifications"""
    service_id: Optional[str] = None
    user_id: Optional[str] = None
    template_confirm: Optional[str] = None
    template_reject: Optional[str] = None
    company_email: str = 'contact@example.com'
    api_url: str = EMAILJS_URL
    timeout: float = 10.0

    @property
    def configured(self) -> bool:
        return all([self.service_id, self.user_id, self.template_confirm, self.template_reject])

    @classmethod
    def from_env(cls) -> 'MailConfig':
        try:
            timeout = float(os.getenv('EMAILJS_TIMEOUT', '10'))
        except ValueError:
            logger.warning("EMAILJS_TIMEOUT is not a number, using 10 seconds")
            timeout = 10.0

        return cls(
            service_id=_env('EMAILJS_SERVICE_ID'),
            user_id=_env('EMAILJS_USER_ID'),
            template_confirm=_env('EMAILJS_TEMPLATE_ID_CONFIRM'),
            template_reject=_env('EMAILJS_TEMPLATE_ID_REJECT'),
            company_email=_env('SMTP_USER') or 'contact@example.com',
            timeout=timeout,
        )


@dataclass
class Settings:
    """Runtime configuration, built once at startup and handed to create_app()"""
    site_root: str = field(default_factory=os.getcwd)
    port: int = 5000
    secret_key: str = 'dev-secret-key-change-in-production'
    log_level: str = 'INFO'
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None
    allowed_origins: str = '*'
    mail: MailConfig = field(default_factory=MailConfig)

    @property
    def data_dir(self) -> str:
        return os.path.join(self.site_root, 'data')

    @property
    def upload_dir(self) -> str:
        return os.path.join(self.site_root, 'uploads')

    @property
    def jobs_file(self) -> str:
        return os.path.join(self.data_dir, 'jobs.json')

    @property
    def applications_file(self) -> str:
        return os.path.join(self.data_dir, 'applications.json')

    @property
    def mail_log_file(self) -> str:
        return os.path.join(self.data_dir, 'email-log.jsonl')

    @property
    def admin_configured(self) -> bool:
        return bool(self.admin_username and self.admin_password)

    @classmethod
    def from_env(cls) -> 'Settings':
        load_dotenv()

        try:
            port = int(os.getenv('PORT', '5000'))
        except ValueError:
            logger.warning("PORT is not an integer, using 5000")
            port = 5000

        return cls(
            site_root=os.path.abspath(os.getenv('SITE_ROOT') or os.getcwd()),
            port=port,
            secret_key=os.environ.get('SESSION_SECRET', 'dev-secret-key-change-in-production'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            admin_username=_env('ADMIN_USERNAME'),
            admin_password=_env('ADMIN_PASSWORD'),
            allowed_origins=os.environ.get('ALLOWED_ORIGINS', '*'),
            mail=MailConfig.from_env(),
        )
