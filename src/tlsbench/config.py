"""Configuration management using Pydantic Settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tlsbench.units import GiB, MiB, parse_size


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TLSBENCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server listeners
    server_host: str = "0.0.0.0"
    http_port: int = 33333
    https_port: int = 33433
    tls_certfile: str = "server.crt"
    tls_keyfile: str = "server.key"

    # Server output
    verbose: bool = False
    report_interval_seconds: float = 1.0

    # Response shaping
    fixed_cap_bytes: int = 5 * GiB
    random_cap_min_bytes: int = 3 * GiB
    random_cap_max_bytes: int = 20 * GiB
    chunk_bytes: int = 2 * MiB
    short_chunk_bytes: int = 1 * MiB
    zero_device: str = "/dev/zero"

    # Load client
    target_url: str = "http://192.168.122.1:33333"
    long_path: str = "dl"
    short_path: str = "dlsr"
    max_errors: int = 10
    request_timeout_seconds: float | None = None

    @field_validator(
        "fixed_cap_bytes",
        "random_cap_min_bytes",
        "random_cap_max_bytes",
        "chunk_bytes",
        "short_chunk_bytes",
        mode="before",
    )
    @classmethod
    def _parse_human_size(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_size(value)
        return value


settings = Settings()
