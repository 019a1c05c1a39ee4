from datetime import date
from pydantic import BaseModel, Field, field_validator


class StreakState(BaseModel):
    # Aliases match the keys the plugin has always written to data.json.
    streak_count: int = Field(default=0, ge=0, alias="streak")
    last_checked_date: str = Field(default="", alias="lastCheckedDate")
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    @field_validator("last_checked_date")
    @classmethod
    def validate_last_checked_date(cls, v):
        if v:
            date.fromisoformat(v)
        return v

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True)


class StreakView(BaseModel):
    streak: int
    last_checked_date: str
    text: str


class CheckResult(BaseModel):
    streak: int
    last_checked_date: str
    message: str
