"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Vector layer settings loaded from environment variables (VECTORS_*)."""

    model_config = SettingsConfigDict(
        env_prefix="VECTORS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Projections
    map_crs: str = "EPSG:3857"      # CRS features are stored in
    export_crs: str = "EPSG:4326"   # KML, GPX and Shapefile all want WGS84

    # Upload guard (20 MiB), checked before any parse
    max_upload_bytes: int = 20_971_520

    # Drawing defaults
    default_color: str = "#71a7d3"
    default_thickness: int = 6
    polygon_fill_opacity: float = 0.2

    # Selection emphasis
    emphasis_color: str = "#FF0000"
    emphasis_point_radius: int = 20
    emphasis_stroke_width: int = 2
    highlight_layer_name: str = "selectLayer"


settings = Settings()
