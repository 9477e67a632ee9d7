import os
import json
import logging
from typing import Any, Dict, List

from utils import utc_now_iso

logger = logging.getLogger(__name__)


class MailLog:
    """Append-only newline-delimited JSON record of every notification attempt"""

    def __init__(self, path: str):
        self.path = path

    def record(self, to: str, subject: str, sent: bool, note: str = None, error: str = None) -> None:
        entry = {'timestamp': utc_now_iso(), 'to': to, 'subject': subject, 'sent': sent}
        if note is not None:
            entry['note'] = note
        if error is not None:
            entry['error'] = error

        try:
            os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(json.dumps(entry) + '\n')
        except OSError as e:
            logger.error(f"Failed to write mail log {self.path}: {e}")

    def entries(self, limit: int = None) -> List[Dict[str, Any]]:
        """Read the log back, newest last. Malformed lines are skipped."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except OSError:
            return []

        entries = []
        for line in lines:
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(json.loads(line))
            except ValueError:
                logger.debug(f"Skipping malformed mail log line: {line[:80]}")

        if limit is not None:
            return entries[-limit:]
        return entries
