from pydantic_settings import BaseSettings, SettingsConfigDict

from housing.data.geo import RegionBBox
from housing.routing.models import RoutingConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Campus Housing Proximity API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    # CORS: "*" for dev; in production set to comma-separated origins, e.g. "https://app.example.com"
    cors_origins: str = "*"

    # Optional API key auth. When enabled, requests must include X-API-Key or Authorization: Bearer <key>.
    api_key_required: bool = False
    api_keys: str = ""  # Comma-separated list of valid keys (no spaces). Example: API_KEYS=key1,key2

    # Routing provider (openrouteservice.org). Empty key = straight-line routes only.
    openrouteservice_api_key: str = ""
    openrouteservice_base_url: str = "https://api.openrouteservice.org"
    route_timeout_seconds: float = 5.0
    default_batch_size: int = 2
    batch_delay_seconds: float = 1.0

    # Plausibility bounds for routed paths: "min_lat,max_lat,min_lng,max_lng" (default: Tunisia)
    region_bbox: str = "30,38,7,12"

    # Proximity search
    default_radius_km: float = 15.0
    nearest_university_max_km: float = 50.0

    def routing_config(self) -> RoutingConfig:
        return RoutingConfig(
            credential=self.openrouteservice_api_key.strip() or None,
            region_bbox=RegionBBox.parse(self.region_bbox),
            base_url=self.openrouteservice_base_url,
            batch_size=self.default_batch_size,
            batch_delay_seconds=self.batch_delay_seconds,
            timeout_seconds=self.route_timeout_seconds,
        )


def get_settings() -> Settings:
    return Settings()
