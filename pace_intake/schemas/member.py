"""
Member Pydantic schemas
"""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class MemberCreate(BaseModel):
    """Schema for registering a referred member"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    medicaid_cin: Optional[str] = Field(None, max_length=16, description="Medicaid Client Identification Number")
    street1: str = Field(..., min_length=1)
    street2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2, description="Two-letter state code")
    zip_code: str = Field(..., pattern=r"^\d{5}(-\d{4})?$")
    referral_source: str = Field(..., min_length=1, description="Who referred the member (DSS, hospital, self...)")

    @field_validator('date_of_birth')
    @classmethod
    def validate_date_of_birth(cls, v: date) -> date:
        if v >= date.today():
            raise ValueError('Date of birth must be in the past')
        return v

    @field_validator('state')
    @classmethod
    def normalize_state(cls, v: str) -> str:
        return v.upper()


class MemberResponse(BaseModel):
    """Schema for member response"""
    id: str = Field(..., description="Member UUID")
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: date
    medicaid_cin: Optional[str]
    street1: str
    street2: Optional[str]
    city: str
    state: str
    zip_code: str
    referral_source: str
    created_at: datetime

    class Config:
        from_attributes = True
