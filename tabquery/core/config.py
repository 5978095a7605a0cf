"""
Loader configuration

Defaults can be overridden per call or through TABQUERY_* environment
variables.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class LoaderConfig:
    """
    Fetch policy for the resource loader

    Attributes:
        timeout: Seconds allowed for one fetch attempt
        retries: Extra attempts after a transient failure
        backoff: Base delay in seconds, doubled after every attempt
        cache_ttl: Seconds a fetched resource stays cached (0 disables)
        user_agent: User-Agent header sent with HTTP requests
    """

    timeout: float = 30.0
    retries: int = 2
    backoff: float = 0.5
    cache_ttl: float = 300.0
    user_agent: str = "tabquery/0.1.0"

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.retries < 0:
            raise ValueError(f"retries must be non-negative, got {self.retries}")
        if self.backoff < 0:
            raise ValueError(f"backoff must be non-negative, got {self.backoff}")
        if self.cache_ttl < 0:
            raise ValueError(f"cache_ttl must be non-negative, got {self.cache_ttl}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LoaderConfig":
        """
        Build a config from TABQUERY_* environment variables

        Args:
            environ: Mapping to read from (default: os.environ)

        Raises:
            ValueError: If a variable is set but not a number
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        for field_name, var, cast in (
            ("timeout", "TABQUERY_TIMEOUT", float),
            ("retries", "TABQUERY_RETRIES", int),
            ("backoff", "TABQUERY_BACKOFF", float),
            ("cache_ttl", "TABQUERY_CACHE_TTL", float),
        ):
            raw = env.get(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                kwargs[field_name] = cast(raw)
            except ValueError:
                raise ValueError(f"{var} must be a number, got '{raw}'") from None

        return cls(**kwargs)
