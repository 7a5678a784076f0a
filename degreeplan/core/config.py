from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	APP_NAME: str = Field(default="Degree Plan API")
	DEBUG: bool = Field(default=False)
	API_PREFIX: str = Field(default="")
	LOG_LEVEL: str = Field(default="INFO")

	# Database
	DATABASE_URL: str = Field(default="")

	# Auth / JWT (tokens are issued elsewhere; this service only verifies them)
	JWT_SECRET: str = Field(default="dev-change-me")
	JWT_ALGORITHM: str = Field(default="HS256")
	ACCESS_TOKEN_EXPIRES_MINUTES: int = Field(default=60)

	# Plan submission rules
	PLAN_NAME_MIN_LENGTH: int = Field(default=5)
	PLAN_NAME_MAX_LENGTH: int = Field(default=50)
	PLAN_MIN_CREDITS: int = Field(default=32)
	PLAN_MAX_COURSES: int = Field(default=12)

	# Azure Monitor / Application Insights
	AZURE_MONITOR_CONN_STR: str = Field(default="")
	ENABLE_APP_INSIGHTS: bool = Field(default=True)
	SAMPLING_RATIO: float = Field(default=1.0)


settings = Settings()
