"""
Shared fixtures for the careers site tests.

Every test gets its own site root under tmp_path, so data/ and uploads/
never leak between tests.
"""

import io
import os

import pytest

from app import create_app
from config import Settings, MailConfig

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


def make_resume(size, filename="resume.pdf", mimetype="application/pdf"):
    """Multipart file tuple accepted by the Flask test client."""
    return (io.BytesIO(b"%" * size), filename, mimetype)


def application_form(resume=None, **overrides):
    data = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+44 7700 900123",
        "cover": "I would love to join the team.",
    }
    data.update(overrides)
    if resume is not None:
        data["resume"] = resume
    return data


def uploaded_files(settings):
    return sorted(os.listdir(settings.upload_dir))


# ============================================================
# Settings / app fixtures
# ============================================================


@pytest.fixture
def mail_config():
    return MailConfig()


@pytest.fixture
def settings(tmp_path, mail_config):
    return Settings(
        site_root=str(tmp_path),
        secret_key="test-secret",
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        mail=mail_config,
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def admin_client(client):
    response = client.post("/admin/login", data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 302
    return client


@pytest.fixture
def components(app):
    return app.extensions["careers"]


@pytest.fixture
def job_store(components):
    return components["job_store"]


@pytest.fixture
def application_store(components):
    return components["application_store"]


@pytest.fixture
def mail_log(components):
    return components["mail_log"]


@pytest.fixture
def configured_mail():
    return MailConfig(
        service_id="service_test",
        user_id="user_test",
        template_confirm="template_confirm",
        template_reject="template_reject",
        company_email="jobs@example.com",
        timeout=2.0,
    )
