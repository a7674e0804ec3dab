"""
Branch Access Core - Audit Store App Configuration
====================================================
Persistent, append-only table of access audit records.
"""

from django.apps import AppConfig


class AuditStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "branch_access.audit_store"
    label = "branch_access_audit_store"
    verbose_name = "Branch Access Audit Store"
