"""
Branch Access Core - Config Public API
========================================
"""

from branch_access.config.settings import BranchSecurityConfig

__all__ = ["BranchSecurityConfig"]
