#!/usr/bin/env python3
"""
Main entry point for the company careers site.

Serves the public pages (home, about, jobs, contact), the job application
form with resume upload, and the admin console for managing postings and
reviewing applications. Configuration comes from the environment (or a
.env file); see config.py.
"""

from app import create_app
from config import Settings

settings = Settings.from_env()
app = create_app(settings)

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=settings.port)
