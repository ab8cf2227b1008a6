"""
Display label for a location
"""

from typing import Optional

# Countries where city + region reads best (e.g. "Toronto, Ontario")
REGION_LABEL_COUNTRIES = ("US", "CA")


def format_label(
    city: Optional[str],
    region: Optional[str],
    country: Optional[str],
    country_code: Optional[str],
) -> str:
    """
    Build a presentation label such as "Miami, Florida", "London, United Kingdom"
    or "Egypt". Returns "" when nothing usable is known.

    Outside the US and Canada the region is never used, only city and country.
    """
    code = (country_code or "").upper()

    if code in REGION_LABEL_COUNTRIES:
        if city:
            if region:
                return f"{city}, {region}"
            if country:
                return f"{city}, {country}"
            return f"{city}, {code}"
        if region:
            if country:
                return f"{region}, {country}"
            return f"{region}, {code}"
        if country:
            return country
        return code

    if city:
        if country:
            return f"{city}, {country}"
        if code:
            return f"{city}, {code}"
        return city
    if country:
        return country
    return ""
