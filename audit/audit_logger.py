# TRAEFIK-STACK v1.0
import getpass
import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path

from config import AUDIT_DIR_NAME

_log = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of audit events"""
    START = "START"
    STOP = "STOP"
    RESTART = "RESTART"
    UPDATE = "UPDATE"
    BACKUP = "BACKUP"
    RESTORE = "RESTORE"
    CONFIG_CHANGE = "CONFIG_CHANGE"


class AuditLogger:
    """
    Append-only trail of the commands that change the proxy.
    Events go to logs/audit/audit.log (JSON lines) and to a daily text file.
    """

    def __init__(self, project_root, enabled=True):
        self.enabled = enabled
        self.log_dir = Path(project_root) / AUDIT_DIR_NAME
        self.log_file = self.log_dir / 'audit.log'
        self.daily_dir = self.log_dir / 'daily'

    def log_event(self, event_type: AuditEventType, target: str, details: dict = None):
        """Log an audit event. Failures are reported to the logger, never raised."""
        if not self.enabled:
            return

        event = {
            'timestamp': datetime.now().isoformat(),
            'user': self._get_current_user(),
            'event_type': event_type.value,
            'target': target,
            'details': details or {}
        }

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(event, default=str) + '\n')
            self._write_daily_log(event)
        except OSError as e:
            _log.warning("audit log not written: %s", e)

    def _write_daily_log(self, event):
        """Write event to the human-readable daily file."""
        self.daily_dir.mkdir(parents=True, exist_ok=True)
        daily_file = self.daily_dir / f"{event['timestamp'][:10]}.txt"

        details = event.get('details', {})
        detail_str = ', '.join(f'{k}={v}' for k, v in details.items()) if details else ''

        line = f"[{event['timestamp'][:19]}] [{event['user']}] {event['event_type']} {event['target']}"
        if detail_str:
            line += f' ({detail_str})'

        with open(daily_file, 'a', encoding='utf-8') as f:
            f.write(line + '\n')

    def _get_current_user(self):
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return "unknown"

    def get_recent_events(self, limit=100, event_type=None):
        """Newest events first, optionally filtered by type"""
        if not self.log_file.exists():
            return []

        events = []
        with open(self.log_file, 'r', encoding='utf-8') as f:
            lines = f.readlines()[::-1]

        for line in lines:
            if not line.strip():
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                continue

            if event_type and event.get('event_type') != event_type.value:
                continue

            events.append(event)
            if len(events) >= limit:
                break

        return events
