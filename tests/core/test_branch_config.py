"""
Tests - Branch Security Configuration
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from branch_access.config.settings import BranchSecurityConfig
from branch_access.errors import ConfigurationError


class TestDefaults:
    def test_default_values(self):
        config = BranchSecurityConfig()
        assert config.to_dict() == {
            "enforce_data_isolation": True,
            "allow_cross_branch_access": True,
            "require_approval_for_sensitive_operations": True,
            "audit_all_operations": True,
            "session_timeout_minutes": 30,
            "max_concurrent_sessions": 3,
        }

    def test_timeout_in_seconds(self):
        assert BranchSecurityConfig(session_timeout_minutes=1.5).session_timeout_seconds == 90.0

    def test_frozen(self):
        config = BranchSecurityConfig()
        with pytest.raises(AttributeError):
            config.audit_all_operations = False


class TestValidation:
    @pytest.mark.parametrize("kwargs, field", [
        ({"session_timeout_minutes": 0}, "session_timeout_minutes"),
        ({"session_timeout_minutes": -5}, "session_timeout_minutes"),
        ({"session_timeout_minutes": "30"}, "session_timeout_minutes"),
        ({"max_concurrent_sessions": 0}, "max_concurrent_sessions"),
        ({"max_concurrent_sessions": 2.5}, "max_concurrent_sessions"),
        ({"allow_cross_branch_access": "yes"}, "allow_cross_branch_access"),
    ])
    def test_rejects_bad_values(self, kwargs, field):
        with pytest.raises(ConfigurationError) as exc_info:
            BranchSecurityConfig(**kwargs)
        assert exc_info.value.field == field


class TestFromMapping:
    def test_snake_case(self):
        config = BranchSecurityConfig.from_mapping({"allow_cross_branch_access": False})
        assert config.allow_cross_branch_access is False

    def test_camel_case_aliases(self):
        config = BranchSecurityConfig.from_mapping({
            "allowCrossBranchAccess": False,
            "sessionTimeout": 15,
            "maxConcurrentSessions": 1,
        })
        assert config.allow_cross_branch_access is False
        assert config.session_timeout_minutes == 15
        assert config.max_concurrent_sessions == 1

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            BranchSecurityConfig.from_mapping({"strictMode": True})
        assert exc_info.value.field == "strictMode"


class TestFromDjangoSettings:
    def test_settings_object(self):
        settings_obj = SimpleNamespace(BRANCH_SECURITY={"audit_all_operations": False})
        config = BranchSecurityConfig.from_django_settings(settings_obj)
        assert config.audit_all_operations is False
        assert config.session_timeout_minutes == 30

    def test_missing_setting_gives_defaults(self):
        assert BranchSecurityConfig.from_django_settings(SimpleNamespace()) == BranchSecurityConfig()

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigurationError):
            BranchSecurityConfig.from_django_settings(SimpleNamespace(BRANCH_SECURITY=["x"]))

    def test_project_settings(self):
        assert BranchSecurityConfig.from_django_settings() == BranchSecurityConfig()
