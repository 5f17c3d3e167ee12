"""Free-text address handling for the ordering provider.

Callers pass addresses as one line ("2 Portola Plaza, Monterey, CA 93940").
The store locator wants two lines and order payloads want structured
fields, so the text is split on commas and the trailing "REGION POSTAL"
part is picked apart with a regex. Anything that does not fit stays in
the street or city field unchanged.
"""

import re

from .models import Address

_CITY_REGION_POSTAL = re.compile(
    r"^(?P<city>.*?)\s*\b(?P<region>[A-Za-z]{2})\.?\s+(?P<postal>\d{5}(?:-\d{4})?)$"
)
_CITY_REGION = re.compile(r"^(?P<city>.*?)\s*\b(?P<region>[A-Za-z]{2})$")
_POSTAL_ONLY = re.compile(r"^(?P<city>.*?)\s*(?P<postal>\d{5}(?:-\d{4})?)$")


def split_address_lines(text: str) -> tuple[str, str]:
    """Split an address into (street line, city/region/postal line)."""
    parts = [p.strip() for p in text.split(",") if p.strip()]
    if len(parts) <= 1:
        return "", text.strip()
    return parts[0], " ".join(parts[1:])


def parse_address(text: str) -> Address:
    street, rest = split_address_lines(text)

    match = _CITY_REGION_POSTAL.match(rest)
    if match:
        return Address(
            street=street,
            city=match["city"].strip(" ,"),
            region=match["region"].upper(),
            postal_code=match["postal"],
        )

    match = _CITY_REGION.match(rest)
    if match and street:
        return Address(
            street=street, city=match["city"].strip(" ,"), region=match["region"].upper()
        )

    match = _POSTAL_ONLY.match(rest)
    if match:
        return Address(
            street=street or match["city"].strip(" ,"),
            city=match["city"].strip(" ,") if street else "",
            postal_code=match["postal"],
        )

    if not street:
        return Address(street=rest)
    return Address(street=street, city=rest)
