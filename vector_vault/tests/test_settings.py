import pytest
from pydantic import ValidationError as PydanticValidationError

from vector_vault.settings import Settings, VectorStoreConfig


def test_vector_defaults():
    config = Settings().vector_config()

    assert config == VectorStoreConfig()
    assert config.dimensions == 1536
    assert config.similarity_threshold == 0.7
    assert config.cache_ttl == 3600
    assert config.cache_prefix == "vector:"


def test_vector_options_from_environment(monkeypatch):
    monkeypatch.setenv("VECTOR_VAULT_VECTOR_DIMENSIONS", "384")
    monkeypatch.setenv("VECTOR_VAULT_SIMILARITY_THRESHOLD", "0.55")
    monkeypatch.setenv("VECTOR_VAULT_CACHE_PREFIX", "emb:")

    config = Settings().vector_config()

    assert config.dimensions == 384
    assert config.similarity_threshold == 0.55
    assert config.cache_prefix == "emb:"


def test_config_is_immutable_and_checked():
    config = VectorStoreConfig()

    with pytest.raises(PydanticValidationError):
        config.dimensions = 3
    with pytest.raises(PydanticValidationError):
        VectorStoreConfig(dimensions=0)


def test_database_url():
    settings = Settings(db_host="db", db_user="u", db_pass="p", db_base="vectors")

    assert settings.sqlalchemy_url == "postgresql+asyncpg://u:p@db:5432/vectors"
    assert Settings(db_dsn="sqlite+aiosqlite:///x.db").sqlalchemy_url == (
        "sqlite+aiosqlite:///x.db"
    )


def test_only_used_options_are_exposed():
    assert "environment" not in Settings.model_fields
    assert {"db_dsn", "redis_host", "vector_dimensions"} <= set(Settings.model_fields)
