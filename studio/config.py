from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    app_name: str = 'Studio Lesson Reminders'
    app_env: str = 'local'
    app_timezone: str = 'UTC'
    database_url: str = 'sqlite:///./studio.db'
    cron_secret: str = ''
    wazzup_api_key: str = ''
    wazzup_channel_id: str = ''
    wazzup_api_base: str = 'https://api.wazzup24.com'
    wazzup_timeout_seconds: float = 10.0
    enable_whatsapp_reminders: bool = True
    reminder_lookahead_minutes: int = 60
    enable_scheduler: bool = False
    reminder_interval_minutes: int = 5
    reminder_job_lock_ttl_seconds: int = 900
    db_slow_query_ms: int = 100
    metrics_slow_ms: int = 200


settings = Settings()
