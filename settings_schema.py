from typing import Literal

from pydantic import BaseModel, Field, ValidationError

class SettingsSchema(BaseModel):
    weight_unit: Literal["kg", "lb"] = "kg"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    default_total_weeks: int = Field(6, ge=1)
    streak_window_days: int = Field(7, ge=1)
    streak_freezes_allowed: int = Field(2, ge=0)
    volume_history_weeks: int = Field(12, ge=1)
    e1rm_history_months: int = Field(6, ge=1)
    activity_months: int = Field(6, ge=1)
    muscle_breakdown_weeks: int = Field(4, ge=1)


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
