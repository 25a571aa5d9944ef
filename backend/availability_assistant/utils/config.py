from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    gemini_api_key: str
    cal_api_key: str
    cal_api_url: str = "https://api.cal.com/v2"
    cal_api_version: str = "2024-09-04"
    cal_event_type_id: str = "2443726"
    cal_credential_id: str = "985381"
    cal_external_id: str = "kiennguyen@dashbooking.com"
    business_name: str = "Creative Nails And Spa"
    business_city: str = "Winnipeg"
    business_timezone: str = "America/Winnipeg"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.0
    http_timeout_seconds: Optional[float] = 30.0  # None disables the client-side timeout
    webhook_id: str = "0bb1d791-61d0-4c82-bd04-319dca34a25d"
    port: int = 8080
    host: str = "0.0.0.0"
    environment: str = "development"
    log_format: str = "plain"

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
