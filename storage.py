"""
Flat JSON-file storage for job postings and applications.

Each store is a single pretty-printed JSON array rewritten in full on every
mutation. There is no locking: two concurrent writers can lose an update.
"""

import os
import json
import logging
import tempfile
from typing import Any, Dict, List, Optional

from models import Job, Application
from utils import now_ms, utc_now_iso, parse_int_prefix, clamp, resolve_resume_path, remove_file_quietly

logger = logging.getLogger(__name__)

MAX_EXPERIENCE_YEARS = 50


class StorageError(Exception):
    """Raised when a store does not reflect a write that was just made"""


class JsonArrayStore:
    """Read and rewrite a JSON array kept in one file"""

    def __init__(self, path: str):
        self.path = path

    def read(self) -> List[Dict[str, Any]]:
        # Unreadable or corrupt files count as an empty collection
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path}, treating as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"{self.path} does not hold a JSON array, treating as empty")
            return []
        return [rec for rec in data if isinstance(rec, dict)]

    def write(self, records: List[Dict[str, Any]]) -> None:
        directory = os.path.dirname(self.path) or '.'
        os.makedirs(directory, exist_ok=True)
        # One temp file per write so concurrent writers never share a handle
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            remove_file_quietly(tmp_path, "(store temp file)")
            raise

    def next_id(self, records: List[Dict[str, Any]]) -> int:
        """Millisecond timestamp, bumped past any id already in use"""
        taken = {str(rec.get('id')) for rec in records}
        new_id = now_ms()
        while str(new_id) in taken:
            new_id += 1
        return new_id


class JobStore(JsonArrayStore):

    def list_jobs(self) -> List[Job]:
        return [Job.from_dict(rec) for rec in self.read()]

    def get_job(self, job_id) -> Optional[Job]:
        for job in self.list_jobs():
            if str(job.id) == str(job_id):
                return job
        return None

    def create_job(self, title, location, description, openings=None, experience=None) -> Job:
        """Append a new posting. ``openings`` falls back to 1, ``experience`` to 0."""
        records = self.read()
        job = Job(
            id=self.next_id(records),
            title=title or '',
            location=location or '',
            description=description or '',
            openings=clamp(parse_int_prefix(openings, 1), 1),
            experience=clamp(parse_int_prefix(experience, 0), 0, MAX_EXPERIENCE_YEARS),
            postedAt=utc_now_iso(),
        )
        records.append(job.to_dict())
        self.write(records)
        logger.info(f"Created job {job.id}: {job.title}")
        return job

    def delete_job(self, job_id) -> None:
        """Remove a posting and verify the rewrite took effect."""
        target = str(job_id)
        records = self.read()
        self.write([rec for rec in records if str(rec.get('id')) != target])

        if any(str(rec.get('id')) == target for rec in self.read()):
            logger.error(f"Failed to delete job {target}")
            raise StorageError(f"Job {target} still present after delete")
        logger.info(f"Deleted job {target}")


class ApplicationStore(JsonArrayStore):

    def __init__(self, path: str, site_root: str):
        super().__init__(path)
        self.site_root = site_root

    def list_applications(self) -> List[Application]:
        return [Application.from_dict(rec) for rec in self.read()]

    def get_application(self, application_id) -> Optional[Application]:
        for application in self.list_applications():
            if str(application.id) == str(application_id):
                return application
        return None

    def create_application(self, job: Job, form: Dict[str, str], resume_ref: Optional[str]) -> Application:
        records = self.read()
        application = Application(
            id=self.next_id(records),
            jobId=job.id,
            name=form.get('name', ''),
            email=form.get('email', ''),
            phone=form.get('phone', ''),
            cover=form.get('cover', ''),
            resume=resume_ref,
            appliedAt=utc_now_iso(),
        )
        records.append(application.to_dict())
        self.write(records)
        logger.info(f"Stored application {application.id} for job {job.id}")
        return application

    def delete_application(self, application_id) -> Optional[Application]:
        """Remove one application and its resume file. Returns the removed record."""
        target = str(application_id)
        removed = None
        remaining = []
        for rec in self.read():
            if removed is None and str(rec.get('id')) == target:
                removed = Application.from_dict(rec)
            else:
                remaining.append(rec)

        if removed is None:
            logger.warning(f"No application {target} to delete")
            return None

        self.remove_resume(removed)
        self.write(remaining)
        logger.info(f"Deleted application {target}")
        return removed

    def delete_applications_for_job(self, job_id) -> List[Application]:
        """Cascade helper: drop every application for a job, with resumes"""
        target = str(job_id)
        removed = []
        remaining = []
        for rec in self.read():
            if str(rec.get('jobId')) == target:
                removed.append(Application.from_dict(rec))
            else:
                remaining.append(rec)

        for application in removed:
            self.remove_resume(application)
        self.write(remaining)
        logger.info(f"Removed {len(removed)} application(s) for job {target}")
        return removed

    def remove_resume(self, application: Application) -> bool:
        if not application.resume:
            return False
        path = resolve_resume_path(self.site_root, application.resume)
        if path is None:
            return False
        if not os.path.exists(path):
            logger.warning(f"Resume file for application {application.id} is already gone: {path}")
            return False
        return remove_file_quietly(path, f"for application {application.id}")
