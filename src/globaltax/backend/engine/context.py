"""Per-jurisdiction context models parsed from free-form ``additional_params``."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class JurisdictionContext(BaseModel):
    """Base class for country-specific calculation inputs.

    Payloads may use camelCase or snake_case keys. Keys a jurisdiction does
    not understand are ignored so the same payload shape can be sent to every
    country.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def regime_hint(self) -> str | None:
        """Return a regime implied by the context, if any."""

        return None


class EmptyContext(JurisdictionContext):
    """Context for jurisdictions without extra inputs."""


class USContext(JurisdictionContext):
    state: str | None = None
    filing_status: str | None = None

    @field_validator("state", mode="before")
    @classmethod
    def _normalise_state(cls, value: Any) -> str | None:
        return _optional_text(value)

    @field_validator("filing_status", mode="before")
    @classmethod
    def _normalise_status(cls, value: Any) -> str | None:
        text = _optional_text(value)
        return text.lower() if text else None

    def regime_hint(self) -> str | None:
        return self.filing_status


class UKContext(JurisdictionContext):
    student_loan_plan: Literal["plan1", "plan2", "plan4"] | None = None

    @field_validator("student_loan_plan", mode="before")
    @classmethod
    def _normalise_plan(cls, value: Any) -> str | None:
        text = _optional_text(value)
        if text is None:
            return None
        return text.lower().replace(" ", "").replace("_", "")


class CanadaContext(JurisdictionContext):
    """Province in any spelling; codes such as ``ON`` map onto regimes via the rule file."""

    province: str | None = None

    @field_validator("province", mode="before")
    @classmethod
    def _normalise_province(cls, value: Any) -> str | None:
        text = _optional_text(value)
        if text is None:
            return None
        return "-".join(text.lower().replace("_", " ").split())

    def regime_hint(self) -> str | None:
        return self.province


class GermanyContext(JurisdictionContext):
    church_member: bool = True
    state: str | None = None

    @field_validator("state", mode="before")
    @classmethod
    def _normalise_state(cls, value: Any) -> str | None:
        return _optional_text(value)


__all__ = [
    "CanadaContext",
    "EmptyContext",
    "GermanyContext",
    "JurisdictionContext",
    "UKContext",
    "USContext",
]
