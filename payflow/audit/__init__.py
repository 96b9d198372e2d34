from payflow.audit.logger import AuditEntry, log_event

__all__ = ["AuditEntry", "log_event"]
