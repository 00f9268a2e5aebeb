from backoffice.models.lead import Lead
from backoffice.models.obd_alert import ObdAlert
from backoffice.models.audit_log import AuditLog

__all__ = [
    "Lead",
    "ObdAlert",
    "AuditLog",
]
