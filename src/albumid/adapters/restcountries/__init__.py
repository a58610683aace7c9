"""REST Countries adapter package."""

from __future__ import annotations

from .client import CountryLookupService, RestCountriesAPIError, RestCountriesClient
from .schema import RestCountry, RestCountryName

__all__ = [
    "CountryLookupService",
    "RestCountriesAPIError",
    "RestCountriesClient",
    "RestCountry",
    "RestCountryName",
]
