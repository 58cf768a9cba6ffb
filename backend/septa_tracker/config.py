from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    transit_view_all_url: str = "https://www3.septa.org/hackathon/TransitViewAll/"
    train_view_url: str = "https://www3.septa.org/api/TrainView/index.php"
    gtfs_rt_vehicle_url: str = "https://www3.septa.org/gtfsrt/septa-pa-us/Vehicle/print.php"
    user_agent: str = "SEPTA-Transit-App/1.0"
    request_timeout_seconds: float = 10.0
    feed_deadline_seconds: float = 12.0
    poll_interval_seconds: int = 5
    feed_probe_enabled: bool = False
    feed_probe_interval_seconds: int = 60
    subway_feed_enabled: bool = True
    route_tables_path: str | None = None
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "case_sensitive": False}


settings = Settings()
