from typing import Optional

from pydantic import BaseModel, field_validator


class WorkerCreate(BaseModel):
    name: str
    email: str
    assigned_location_id: Optional[int] = None
    is_active: bool = True

    @field_validator('email')
    @classmethod
    def clean_email(cls, value: str) -> str:
        return value.strip().lower()
