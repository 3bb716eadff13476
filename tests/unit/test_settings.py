"""
Unit tests for configuration parsing.
"""

import logging

import pytest
from pydantic import ValidationError

from buckets.config.settings import Settings
from buckets.core.access.gate import OperationKind


class TestSettings:

    def test_defaults_require_no_tokens(self, tmp_path):
        settings = Settings(bucket_path=str(tmp_path))

        requirements = settings.authentication_requirements()

        assert not any(requirements.as_dict().values())
        assert settings.validate_required_fields() == []

    def test_keys_are_split_and_trimmed(self):
        settings = Settings(authentication_keys=" one, two ,,three ")
        assert settings.authentication_keys_list == ["one", "two", "three"]

    def test_flags_map_to_operation_kinds(self):
        settings = Settings(
            authentication_keys="k",
            require_auth_object_create=True,
            require_auth_object_delete=True,
        )

        requirements = settings.authentication_requirements()

        assert requirements.is_required(OperationKind.OBJECT_CREATE)
        assert requirements.is_required(OperationKind.OBJECT_DELETE)
        assert not requirements.is_required(OperationKind.OBJECT_READ)

    def test_each_call_returns_a_new_snapshot(self):
        settings = Settings()
        assert settings.authentication_requirements() is not settings.authentication_requirements()

    def test_required_tokens_without_keys_is_reported(self):
        settings = Settings(require_auth_bucket_list=True, authentication_keys="")

        problems = settings.validate_required_fields()

        assert len(problems) == 1
        assert "BucketList" in problems[0]

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("BUCKET_PATH", "/srv/buckets")
        monkeypatch.setenv("REQUIRE_AUTH_OBJECT_READ", "true")

        settings = Settings()

        assert settings.bucket_path == "/srv/buckets"
        assert settings.require_auth_object_read is True

    def test_cors_origins(self):
        assert Settings(cors_origins="").cors_origins_list == []
        assert Settings(cors_origins="*").cors_origins_list == ["*"]
        assert Settings(cors_origins="http://a, http://b").cors_origins_list == ["http://a", "http://b"]

    def test_log_level_is_case_insensitive(self):
        assert Settings(log_level="debug").log_level == "DEBUG"
        assert Settings(log_level=" Warning ").log_level == "WARNING"

    def test_unknown_log_level_fails_validation(self, monkeypatch):
        with pytest.raises(ValidationError):
            Settings(log_level="loud")

        monkeypatch.setenv("LOG_LEVEL", "verbose")
        with pytest.raises(ValidationError):
            Settings()

    def test_app_sets_package_logger_only(self, tmp_path):
        from buckets.main import create_app

        root_level = logging.getLogger().level
        create_app(Settings(bucket_path=str(tmp_path), log_level="DEBUG"))

        assert logging.getLogger("buckets").level == logging.DEBUG
        assert logging.getLogger().level == root_level
