import os
import logging
from flask import Flask
from flask_cors import CORS
from flask_login import LoginManager
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Settings
from models import AdminUser
from storage import JobStore, ApplicationStore
from uploads import ResumeUploadHandler, MAX_RESUME_BYTES
from mail_log import MailLog
from email_notifier import EmailNotifier

logger = logging.getLogger(__name__)

# Room for the text fields alongside a maximum-size resume
REQUEST_OVERHEAD_BYTES = 1024 * 1024


def create_app(settings: Settings = None) -> Flask:
    settings = settings or Settings.from_env()

    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    app = Flask(__name__)
    # The public job feed may be embedded by other sites; restrict CORS to /api/*
    CORS(app, resources={r"/api/*": {"origins": settings.allowed_origins}})
    app.secret_key = settings.secret_key
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    app.config["SETTINGS"] = settings
    app.config["UPLOAD_FOLDER"] = settings.upload_dir
    app.config["MAX_CONTENT_LENGTH"] = MAX_RESUME_BYTES + REQUEST_OVERHEAD_BYTES

    os.makedirs(settings.data_dir, exist_ok=True)
    os.makedirs(settings.upload_dir, exist_ok=True)

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        if settings.admin_configured and user_id == settings.admin_username:
            return AdminUser(user_id)
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return 'Forbidden', 403

    if not settings.admin_configured:
        logger.warning("ADMIN_USERNAME or ADMIN_PASSWORD not set; admin login is disabled")

    if settings.mail.configured:
        logger.info("EmailJS Mailer configured via API.")
    else:
        logger.info("EmailJS Mailer not fully configured. Check all EmailJS environment variables.")

    mail_log = MailLog(settings.mail_log_file)
    components = {
        'job_store': JobStore(settings.jobs_file),
        'application_store': ApplicationStore(settings.applications_file, settings.site_root),
        'uploads': ResumeUploadHandler(settings.upload_dir),
        'mail_log': mail_log,
        'notifier': EmailNotifier(settings.mail, mail_log),
    }
    app.extensions['careers'] = components

    from routes import register_routes
    register_routes(app, **components)

    return app
