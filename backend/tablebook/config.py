from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


class Settings(BaseModel):
    restaurant_timezone: str = Field(default="UTC")
    calendar_days: int = Field(default=14, ge=1)
    default_party_size: int = Field(default=2, ge=1)
    max_party_size: int = Field(default=20, ge=1)
    submit_delay_seconds: float = Field(default=1.0, ge=0)
    confirmation_prefix: str = Field(default="RS")
    slot_availability_rate: float = Field(default=1.0, ge=0, le=1)
    table_availability_rate: float = Field(default=1.0, ge=0, le=1)
    max_sessions: int = Field(default=1000, ge=1)


@lru_cache
def get_settings() -> Settings:
    defaults = Settings.model_fields
    return Settings(
        restaurant_timezone=os.getenv("RESTAURANT_TIMEZONE", defaults["restaurant_timezone"].default),
        calendar_days=int(os.getenv("CALENDAR_DAYS", str(defaults["calendar_days"].default))),
        default_party_size=int(os.getenv("DEFAULT_PARTY_SIZE", str(defaults["default_party_size"].default))),
        max_party_size=int(os.getenv("MAX_PARTY_SIZE", str(defaults["max_party_size"].default))),
        submit_delay_seconds=float(
            os.getenv("SUBMIT_DELAY_SECONDS", str(defaults["submit_delay_seconds"].default))
        ),
        confirmation_prefix=os.getenv("CONFIRMATION_PREFIX", defaults["confirmation_prefix"].default),
        slot_availability_rate=float(
            os.getenv("SLOT_AVAILABILITY_RATE", str(defaults["slot_availability_rate"].default))
        ),
        table_availability_rate=float(
            os.getenv("TABLE_AVAILABILITY_RATE", str(defaults["table_availability_rate"].default))
        ),
        max_sessions=int(os.getenv("MAX_SESSIONS", str(defaults["max_sessions"].default))),
    )
