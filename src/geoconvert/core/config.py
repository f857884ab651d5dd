"""
Configuration settings for the geoconvert application.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Attributes:
        max_upload_size_mb: Maximum file upload size in megabytes
        max_archive_size_mb: Maximum total uncompressed size of an uploaded archive
        allowed_extensions: Tuple of allowed upload file extensions
        tolerance_percent: Default relative area tolerance for validation
        bounds_tolerance: Envelope tolerance; None reuses the area tolerance
        kml_document_name: Name of the Document element in converted KML
        kml_document_description: Description of the converted KML Document
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="GEOCONVERT_",
    )

    # Upload settings
    max_upload_size_mb: int = 50
    max_archive_size_mb: int = 200
    allowed_extensions: tuple[str, ...] = (".kml", ".kmz", ".geojson", ".json", ".zip")

    # Validation settings
    tolerance_percent: float = Field(default=0.05, ge=0)
    bounds_tolerance: Optional[float] = Field(default=None, ge=0)

    # KML output
    kml_document_name: str = "Converted GeoJSON"
    kml_document_description: str = "Converted from GeoJSON file"

    # API settings
    api_prefix: str = "/api"
    port: int = 8000

    # CORS settings
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Logging
    log_level: Optional[str] = None

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get maximum upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def max_archive_size_bytes(self) -> int:
        """Get maximum uncompressed archive size in bytes."""
        return self.max_archive_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()
