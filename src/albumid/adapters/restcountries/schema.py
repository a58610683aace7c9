"""REST Countries v3.1 response schemas (only the naming fields)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from albumid.domain.country import CountryRecord


class RestCountryName(BaseModel):
    model_config = ConfigDict(extra="allow")

    common: str | None = None
    official: str | None = None


class RestCountry(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    cca2: str
    name: RestCountryName = Field(default_factory=RestCountryName)
    alt_spellings: list[str] = Field(default_factory=list, alias="altSpellings")

    def to_record(self) -> CountryRecord:
        return CountryRecord(
            code=self.cca2.upper(),
            common_name=self.name.common,
            official_name=self.name.official,
            alt_spellings=tuple(self.alt_spellings),
        )
