# TRAEFIK-STACK v1.0
from audit.audit_logger import AuditLogger, AuditEventType

__all__ = [
    'AuditLogger',
    'AuditEventType',
]
