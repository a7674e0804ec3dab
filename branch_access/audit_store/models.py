"""
Branch Access Core - Audit Store Model
========================================
One row per audited access decision.

RULES:
- Rows are inserted, never updated or deleted by this package
- metadata is free-form JSON supplied by the caller
"""

from __future__ import annotations

from django.db import models


class AccessAuditLog(models.Model):
    occurred_at = models.DateTimeField()
    user_id = models.CharField(max_length=128)
    branch_id = models.CharField(max_length=64)
    operation = models.CharField(max_length=16)
    resource_type = models.CharField(max_length=16)
    access_granted = models.BooleanField()
    restriction_level = models.CharField(max_length=8)
    reason = models.CharField(max_length=255)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "bac_access_audit_log"
        ordering = ["occurred_at", "id"]
        indexes = [
            models.Index(fields=["user_id", "occurred_at"], name="idx_audit_user_time"),
            models.Index(fields=["branch_id", "occurred_at"], name="idx_audit_branch_time"),
        ]

    def __str__(self) -> str:
        verdict = "granted" if self.access_granted else "denied"
        return f"{self.user_id}:{self.operation}:{self.resource_type}:{verdict}"
