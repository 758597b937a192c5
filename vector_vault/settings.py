import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL


class LogLevel(str, enum.Enum):  # noqa: WPS600
    """Possible log levels."""

    NOTSET = "NOTSET"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


class VectorStoreConfig(BaseModel):
    """
    Options of the vector store, fixed once the service is created.

    :param dimensions: required embedding length
    :param similarity_threshold: default search cutoff
    :param cache_ttl: cache entry lifetime in seconds
    :param cache_prefix: namespace for cache keys
    """

    model_config = ConfigDict(frozen=True)

    dimensions: int = Field(default=1536, gt=0)
    similarity_threshold: float = Field(default=0.7, ge=-1.0, le=1.0)
    cache_ttl: int = Field(default=3600, gt=0)
    cache_prefix: str = "vector:"


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    host: str = "localhost"
    port: int = 8000
    # quantity of workers for uvicorn
    workers_count: int = 1
    # Enable uvicorn reloading
    reload: bool = False

    log_level: LogLevel = LogLevel.INFO
    enable_file_logging: bool = False
    logs_dir: Optional[str] = None
    structured_logging: bool = False

    # Variables for the database
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "vector_vault"
    db_pass: str = "vector_vault"
    db_base: str = "vector_vault"
    db_echo: bool = False
    # Full SQLAlchemy URL, takes precedence over the parts above
    db_dsn: Optional[str] = None
    db_connect_attempts: int = 3

    # Variables for Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_pass: Optional[str] = None
    redis_timeout: int = 5  # Seconds

    # Vector store
    vector_dimensions: int = 1536  # OpenAI embedding dimension
    similarity_threshold: float = 0.7
    cache_ttl: int = 3600  # Seconds
    cache_prefix: str = "vector:"

    @property
    def db_url(self) -> URL:
        """
        Assemble database URL from settings.

        :return: database URL.
        """
        return URL.build(
            scheme="postgresql+asyncpg",
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_pass,
            path=f"/{self.db_base}",
        )

    @property
    def sqlalchemy_url(self) -> str:
        """
        URL handed to SQLAlchemy, `db_dsn` when it is set.

        :return: database URL string.
        """
        return self.db_dsn or str(self.db_url)

    @property
    def redis_url(self) -> URL:
        """
        Assemble Redis URL from settings.

        :return: redis URL.
        """
        return URL.build(
            scheme="redis",
            host=self.redis_host,
            port=self.redis_port,
            password=self.redis_pass,
            path=f"/{self.redis_db}",
        )

    def vector_config(self) -> VectorStoreConfig:
        """
        Build the vector store options from settings.

        :return: immutable vector store config.
        """
        return VectorStoreConfig(
            dimensions=self.vector_dimensions,
            similarity_threshold=self.similarity_threshold,
            cache_ttl=self.cache_ttl,
            cache_prefix=self.cache_prefix,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_VAULT_",
    )


settings = Settings()
