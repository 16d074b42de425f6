"""
Tests for Settings and setup_logging.
"""

import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from projectideas.config import Settings, setup_logging


class TestSettingsFromEnv:
    def test_defaults(self) -> None:
        settings = Settings.from_env({})

        assert settings.store == "memory"
        assert settings.collection_prefix == "dev"
        assert settings.items_per_page == 10
        assert settings.minio_endpoint == "localhost:9000"
        assert not settings.minio_secure
        assert not settings.shared_store

    def test_reads_variables(self) -> None:
        settings = Settings.from_env(
            {
                "PROJECTIDEAS_STORE": "MinIO",
                "PROJECTIDEAS_COLLECTION_PREFIX": "prod",
                "PROJECTIDEAS_ITEMS_PER_PAGE": "25",
                "MINIO_ENDPOINT": "minio:9000",
                "MINIO_ACCESS_KEY": "key",
                "MINIO_SECRET_KEY": "secret",
                "MINIO_SECURE": "true",
                "PROJECTIDEAS_SHARED_STORE": "yes",
            }
        )

        assert settings.store == "minio"
        assert settings.collection_prefix == "prod"
        assert settings.items_per_page == 25
        assert settings.minio_endpoint == "minio:9000"
        assert settings.minio_access_key == "key"
        assert settings.minio_secret_key == "secret"
        assert settings.minio_secure
        assert settings.shared_store

    @patch.dict("os.environ", {"PROJECTIDEAS_ITEMS_PER_PAGE": "7"})
    def test_defaults_to_process_environment(self) -> None:
        assert Settings.from_env().items_per_page == 7

    @pytest.mark.parametrize(
        "variables",
        [
            {"PROJECTIDEAS_ITEMS_PER_PAGE": "0"},
            {"PROJECTIDEAS_ITEMS_PER_PAGE": "many"},
            {"PROJECTIDEAS_STORE": "cosmos"},
            {"PROJECTIDEAS_COLLECTION_PREFIX": "  "},
        ],
    )
    def test_rejects_invalid_values(self, variables) -> None:
        with pytest.raises(ValidationError):
            Settings.from_env(variables)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    @patch.dict("os.environ", {"LOG_LEVEL": "debug"})
    def test_sets_level(self) -> None:
        setup_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_invalid_level_defaults_to_info_and_warns(self) -> None:
        with patch("projectideas.config.logger") as config_logger:
            setup_logging({"LOG_LEVEL": "chatty"})

        assert logging.getLogger().level == logging.INFO
        config_logger.warning.assert_called_once()
        _, kwargs = config_logger.warning.call_args
        assert kwargs["extra"] == {"log_level": "CHATTY"}

    def test_mapping_overrides_environment(self) -> None:
        with patch.dict("os.environ", {"LOG_LEVEL": "error"}):
            setup_logging({"LOG_LEVEL": "warning"})

        assert logging.getLogger().level == logging.WARNING
