from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

Scope = Literal["daily", "weekly"]
TriggerCategory = Literal["workout", "workout_count", "nutrition", "streak"]


def _aware(v: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps from storage are taken as UTC.
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class QuestInstance(BaseModel):
    quest_id: str
    scope: Scope
    title: str
    description: str = ""
    icon: str = "⚡"
    target: int = Field(gt=0)
    progress: int = Field(default=0, ge=0)
    xp_reward: int = Field(gt=0)
    completed: bool = False
    completed_at: Optional[datetime] = None
    expires_at: datetime

    @field_validator("completed_at", "expires_at")
    @classmethod
    def validate_timezone(cls, v):
        return _aware(v)

    @model_validator(mode="after")
    def check_progress(self):
        if self.progress > self.target:
            raise ValueError("progress cannot exceed target")
        if self.completed and self.progress < self.target:
            raise ValueError("completed quest must have reached its target")
        return self

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_open(self, now: datetime) -> bool:
        return not self.completed and not self.is_expired(now)


class UserProgressionState(BaseModel):
    xp: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_active_at: Optional[datetime] = None
    grace_used_this_week: bool = False
    # Quest day on which the weekly grace was last spent.
    grace_used_on: Optional[date] = None
    active_quests: list[QuestInstance] = []
    model_config = {"validate_assignment": True}

    @field_validator("last_active_at")
    @classmethod
    def validate_timezone(cls, v):
        return _aware(v)


class ActivityEvent(BaseModel):
    category: TriggerCategory
    magnitude: int = 1
    occurred_at: Optional[datetime] = None
    model_config = {"extra": "ignore"}

    @field_validator("magnitude")
    @classmethod
    def clamp_magnitude(cls, v):
        return max(v, 0)

    @field_validator("occurred_at")
    @classmethod
    def validate_timezone(cls, v):
        return _aware(v)


class QuestCompletion(BaseModel):
    quest_id: str
    title: str
    xp_reward: int


class ActivityResult(BaseModel):
    xp_awarded: int = 0
    quest_completions: list[QuestCompletion] = []
    rank_up: Optional[str] = None
    streak: int = 0
