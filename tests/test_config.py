"""
Unit Tests for StoreConfig

STAFF ENGINEER PATTERNS:
------------------------
1. Environment variable handling tested with patch.dict
2. Invalid configuration fails at construction, not at first query
"""

import pytest
from unittest.mock import patch

from semantic_store.config import StoreConfig, get_config, reset_config
from semantic_store.core.errors import InvalidInput


class TestStoreConfigFromEnv:
    def setup_method(self):
        reset_config()

    def teardown_method(self):
        reset_config()

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = StoreConfig.from_env()

        assert config.backend == "memory"
        assert config.table_name == "vector_documents"
        assert config.embedding_model == "text-embedding-ada-002"
        assert config.embedding_dim == 1536
        assert config.embedding_timeout_s == 30.0
        assert config.store_timeout_s == 10.0
        assert config.use_mock_embeddings is False

    def test_reads_environment(self):
        env = {
            "SEMANTIC_STORE_BACKEND": "Postgres",
            "DATABASE_URL": "postgresql://u:p@db/finance",
            "SEMANTIC_STORE_TABLE": "workspace_docs",
            "EMBEDDING_TIMEOUT_S": "2.5",
            "STORE_TIMEOUT_S": "4",
            "USE_MOCK_EMBEDDINGS": "yes",
        }
        with patch.dict("os.environ", env, clear=True):
            config = StoreConfig.from_env()

        assert config.backend == "postgres"
        assert config.connection_string == "postgresql://u:p@db/finance"
        assert config.table_name == "workspace_docs"
        assert config.embedding_timeout_s == 2.5
        assert config.store_timeout_s == 4.0
        assert config.use_mock_embeddings is True

    def test_dimension_follows_model(self):
        with patch.dict("os.environ", {"EMBEDDING_MODEL": "text-embedding-3-large"}, clear=True):
            assert StoreConfig.from_env().embedding_dim == 3072

    def test_explicit_dimension_wins(self):
        env = {"EMBEDDING_MODEL": "text-embedding-3-large", "EMBEDDING_DIM": "256"}
        with patch.dict("os.environ", env, clear=True):
            assert StoreConfig.from_env().embedding_dim == 256

    @pytest.mark.parametrize(
        "env",
        [
            {"EMBEDDING_DIM": "big"},
            {"STORE_TIMEOUT_S": "soon"},
            {"SEMANTIC_STORE_BACKEND": "mongodb"},
            {"SEMANTIC_STORE_TABLE": "docs; DROP TABLE users"},
        ],
    )
    def test_bad_values_are_invalid_input(self, env):
        with patch.dict("os.environ", env, clear=True):
            with pytest.raises(InvalidInput):
                StoreConfig.from_env()

    def test_get_config_singleton(self):
        with patch.dict("os.environ", {}, clear=True):
            assert get_config() is get_config()


class TestStoreConfigValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"embedding_dim": 0},
            {"embedding_timeout_s": 0},
            {"store_timeout_s": -1},
            {"table_name": "1docs"},
        ],
    )
    def test_rejects_invalid_fields(self, kwargs):
        with pytest.raises(InvalidInput):
            StoreConfig(**kwargs)
