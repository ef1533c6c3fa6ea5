"""
Company API schemas (entities and request DTOs).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Employee(BaseModel):
    id: int
    company_id: int
    name: str | None = None
    age: int | None = None
    position: str | None = None


class Company(BaseModel):
    id: int
    name: str
    address: str
    country: str
    employees: list[Employee] = Field(default_factory=list)


class CompanyForCreationDto(BaseModel):
    # Only the writable columns; unknown body fields (e.g. "id") are dropped.
    name: str
    address: str
    country: str


class CompanyForUpdateDto(CompanyForCreationDto):
    """
    Same shape as creation; kept separate so the two can diverge.
    """
