"""Clearbit API payloads.

Only the fields querysvc reads are modelled; everything else is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ClearbitModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ClearbitCategory(_ClearbitModel):
    sector: str | None = None
    industry_group: str | None = Field(default=None, alias="industryGroup")
    industry: str | None = None
    sub_industry: str | None = Field(default=None, alias="subIndustry")


class ClearbitMetrics(_ClearbitModel):
    employees: int | None = None
    employees_range: str | None = Field(default=None, alias="employeesRange")


class ClearbitCompany(_ClearbitModel):
    """Company record from the Company API (``/v2/companies/find``) or Name-to-Domain API."""

    name: str | None = None
    legal_name: str | None = Field(default=None, alias="legalName")
    domain: str | None = None
    description: str | None = None
    category: ClearbitCategory | None = None
    metrics: ClearbitMetrics | None = None


class ClearbitCompanySuggestion(_ClearbitModel):
    """Entry returned by the Autocomplete API."""

    name: str = ""
    domain: str = ""
    logo: str | None = None
