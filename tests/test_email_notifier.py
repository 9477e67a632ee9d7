"""
Tests for EmailJS notifications and the mail log (email_notifier.py, mail_log.py).

The requests transport is always mocked.
"""

import json

import pytest
import requests
from unittest.mock import patch, MagicMock

from config import MailConfig
from email_notifier import EmailNotifier, NotificationError
from mail_log import MailLog
from models import Application, Job


@pytest.fixture
def log(tmp_path):
    return MailLog(str(tmp_path / "data" / "email-log.jsonl"))


@pytest.fixture
def application():
    return Application(id=1, jobId=7, name="Jane Doe", email="jane@example.com", phone="0123456789",
                       cover="Hello", resume=None, appliedAt="2024-01-01T00:00:00.000Z")


@pytest.fixture
def job():
    return Job(id=7, title="Site Manager", location="Leeds", description="", openings=1,
               experience=3, postedAt="2024-01-01T00:00:00.000Z")


def _response(ok=True, status_code=200, text="OK"):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.text = text
    return response


# ============================================================
# Configuration detection
# ============================================================


class TestMailConfig:
    def test_all_four_required(self, configured_mail):
        assert configured_mail.configured

    @pytest.mark.parametrize("missing", ["service_id", "user_id", "template_confirm", "template_reject"])
    def test_any_missing_is_unconfigured(self, configured_mail, missing):
        setattr(configured_mail, missing, None)
        assert not configured_mail.configured

    def test_from_env_treats_blank_as_missing(self, monkeypatch):
        monkeypatch.setenv("EMAILJS_SERVICE_ID", "svc")
        monkeypatch.setenv("EMAILJS_USER_ID", "user")
        monkeypatch.setenv("EMAILJS_TEMPLATE_ID_CONFIRM", "confirm")
        monkeypatch.setenv("EMAILJS_TEMPLATE_ID_REJECT", "  ")
        assert not MailConfig.from_env().configured


# ============================================================
# Unconfigured mailer
# ============================================================


class TestUnconfigured:
    def test_no_network_call_and_log_lines(self, log, application, job):
        notifier = EmailNotifier(MailConfig(), log)

        with patch("email_notifier.requests.post") as post:
            assert notifier.send_confirmation(application, job) is False
            assert notifier.send_rejection(application, job.title) is False
            post.assert_not_called()

        entries = log.entries()
        assert len(entries) == 2
        assert all(entry["sent"] is False for entry in entries)
        assert entries[0]["subject"] == "Application Received: Site Manager"
        assert entries[1]["subject"] == "Update on Application for Site Manager"
        assert entries[0]["to"] == "jane@example.com"

    def test_send_template_raises(self, log):
        with pytest.raises(NotificationError):
            EmailNotifier(MailConfig(), log).send_template("t", {})


# ============================================================
# Configured mailer
# ============================================================


class TestConfigured:
    def test_confirmation_payload(self, configured_mail, log, application, job):
        notifier = EmailNotifier(configured_mail, log)

        with patch("email_notifier.requests.post", return_value=_response()) as post:
            assert notifier.send_confirmation(application, job) is True

        args, kwargs = post.call_args
        assert args[0] == configured_mail.api_url
        assert kwargs["timeout"] == 2.0
        payload = kwargs["json"]
        assert payload["service_id"] == "service_test"
        assert payload["user_id"] == "user_test"
        assert payload["template_id"] == "template_confirm"
        params = payload["template_params"]
        assert params["applicant_name"] == "Jane Doe"
        assert params["job_location"] == "Leeds"
        assert params["company_email"] == "jobs@example.com"
        assert params["email"] == params["applicant_email"] == "jane@example.com"

        entry = log.entries()[-1]
        assert entry["sent"] is True
        assert entry["note"] == "EmailJS"

    def test_rejection_uses_reject_template(self, configured_mail, log, application):
        notifier = EmailNotifier(configured_mail, log)

        with patch("email_notifier.requests.post", return_value=_response()) as post:
            assert notifier.send_rejection(application, "Welder") is True

        payload = post.call_args.kwargs["json"]
        assert payload["template_id"] == "template_reject"
        assert payload["template_params"]["job_title"] == "Welder"
        assert "cover_letter" not in payload["template_params"]

    def test_non_success_response_is_logged(self, configured_mail, log, application, job):
        notifier = EmailNotifier(configured_mail, log)

        with patch("email_notifier.requests.post", return_value=_response(False, 400, "bad template")):
            assert notifier.send_confirmation(application, job) is False

        entry = log.entries()[-1]
        assert entry["sent"] is False
        assert "400" in entry["error"]

    def test_network_error_is_swallowed(self, configured_mail, log, application):
        notifier = EmailNotifier(configured_mail, log)

        with patch("email_notifier.requests.post", side_effect=requests.ConnectionError("down")):
            assert notifier.send_rejection(application) is False

        entry = log.entries()[-1]
        assert entry["sent"] is False
        assert entry["subject"] == "Update on Application for a job"
        assert "down" in entry["error"]


# ============================================================
# Mail log
# ============================================================


class TestMailLog:
    def test_appends_json_lines(self, log):
        log.record("a@example.com", "Hi", sent=True, note="EmailJS")
        log.record("b@example.com", "Hi", sent=False, error="boom")

        with open(log.path) as f:
            lines = f.read().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert set(first) == {"timestamp", "to", "subject", "sent", "note"}
        assert json.loads(lines[1])["error"] == "boom"

    def test_write_failure_not_propagated(self, tmp_path):
        # a directory cannot be opened for appending
        log = MailLog(str(tmp_path))
        log.record("a@example.com", "Hi", sent=False)

    def test_entries_skip_malformed_and_limit(self, log):
        log.record("a@example.com", "1", sent=True)
        with open(log.path, "a") as f:
            f.write("not json\n")
        log.record("b@example.com", "2", sent=True)
        log.record("c@example.com", "3", sent=True)

        assert [e["subject"] for e in log.entries()] == ["1", "2", "3"]
        assert [e["subject"] for e in log.entries(limit=2)] == ["2", "3"]

    def test_missing_log_reads_empty(self, log):
        assert log.entries() == []
