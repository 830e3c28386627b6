from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # API Configuration
    debug: bool = False
    environment: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"

    # Importer limits
    # Pasted text above this size is rejected before it reaches the parser
    max_import_characters: int = 500_000
    # Minimum classifier confidence for taking the hierarchical path. Any text
    # that passes the hierarchical gate scores at least 0.55, so only values
    # above that send weak matches to the freeform parser.
    hierarchical_min_confidence: float = 0.5
    max_description_length: int = 1000

    # Preview cache (previews wait here until the user confirms the import)
    import_preview_ttl_seconds: float = 900.0
    import_preview_cache_size: int = 256

    # Defaults applied to imported records
    default_test_case_status: str = "Pending"
    default_test_case_category: str = "Functional"

    # Persistence service (configure via environment)
    persistence_base_url: Optional[str] = None
    persistence_api_token: Optional[str] = None
    persistence_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
