"""UK postcode helpers: format validation, normalisation and area-to-region lookup."""

import re
from typing import Optional

UK_POSTCODE_PATTERN = re.compile(r"^([A-Z]{1,2}\d{1,2}[A-Z]?)\s*(\d[A-Z]{2})$", re.IGNORECASE)
AREA_PATTERN = re.compile(r"^([A-Za-z]{1,2})")

# Postcode area (leading letters) to county / region.
REGION_BY_AREA: dict[str, str] = {
    # Greater London
    "W": "Greater London", "WC": "Greater London", "SW": "Greater London",
    "SE": "Greater London", "E": "Greater London", "EC": "Greater London",
    "N": "Greater London", "NW": "Greater London", "IG": "Greater London",
    "RM": "Greater London", "EN": "Greater London", "HA": "Greater London",
    "UB": "Greater London", "TW": "Greater London", "KT": "Greater London",
    "SM": "Greater London", "CR": "Greater London", "BR": "Greater London",
    "DA": "Greater London",
    # Home counties
    "AL": "Hertfordshire", "WD": "Hertfordshire", "SG": "Hertfordshire", "HP": "Hertfordshire",
    "CM": "Essex", "SS": "Essex", "CO": "Essex",
    "ME": "Kent", "CT": "Kent", "TN": "Kent",
    "GU": "Surrey", "RH": "Surrey",
    "RG": "Berkshire", "SL": "Berkshire",
    "MK": "Buckinghamshire",
    "LU": "Bedfordshire",
    # East
    "CB": "Cambridgeshire", "PE": "Cambridgeshire",
    "NR": "Norfolk",
    "IP": "Suffolk",
    "OX": "Oxfordshire",
    # North West
    "M": "Greater Manchester", "OL": "Greater Manchester", "BL": "Greater Manchester",
    "SK": "Greater Manchester", "WA": "Greater Manchester",
    "L": "Merseyside", "CH": "Merseyside",
    "PR": "Lancashire", "BB": "Lancashire", "FY": "Lancashire",
    "CW": "Cheshire",
    # Midlands
    "B": "West Midlands", "CV": "West Midlands", "WS": "West Midlands",
    "WV": "West Midlands", "DY": "West Midlands",
    "DE": "Derbyshire",
    "NG": "Nottinghamshire",
    "LE": "Leicestershire",
    "ST": "Staffordshire",
    "SY": "Shropshire", "TF": "Shropshire",
    "WR": "Worcestershire",
    "NN": "Northamptonshire",
    "LN": "Lincolnshire",
    # Yorkshire
    "LS": "West Yorkshire", "BD": "West Yorkshire", "HX": "West Yorkshire",
    "HD": "West Yorkshire", "WF": "West Yorkshire",
    "S": "South Yorkshire", "DN": "South Yorkshire",
    # South and South West
    "SO": "Hampshire", "PO": "Hampshire",
    "BN": "Sussex",
    "BH": "Dorset", "DT": "Dorset",
    "BA": "Somerset", "TA": "Somerset",
    "EX": "Devon", "TQ": "Devon", "PL": "Devon",
    "TR": "Cornwall",
    "BS": "Bristol",
    "GL": "Gloucestershire",
    "SN": "Wiltshire", "SP": "Wiltshire",
    # Scotland
    "G": "Glasgow", "EH": "Edinburgh", "AB": "Aberdeenshire", "DD": "Dundee",
    "FK": "Falkirk", "KY": "Fife", "PA": "Argyll", "PH": "Perth", "IV": "Inverness",
    # Wales
    "CF": "Cardiff", "SA": "Swansea", "NP": "Newport", "LD": "Powys", "LL": "North Wales",
    # Northern Ireland
    "BT": "Northern Ireland",
}


def validate_uk_postcode(postcode: Optional[str]) -> bool:
    if not postcode:
        return False
    return bool(UK_POSTCODE_PATTERN.match(postcode.strip()))


def format_uk_postcode(postcode: str) -> str:
    """Upper-case and insert the outward/inward space; unrecognised input is returned as-is.

    Examples:
        >>> format_uk_postcode("al101aa")
        'AL10 1AA'
        >>> format_uk_postcode("not a postcode")
        'not a postcode'
    """
    compact = re.sub(r"\s+", "", postcode.strip().upper())
    match = UK_POSTCODE_PATTERN.match(compact)
    if not match:
        return postcode
    return f"{match.group(1)} {match.group(2)}"


def postcode_area(postcode: Optional[str]) -> Optional[str]:
    """Leading one or two letters of a postcode, upper-cased (``"AL10 1AA"`` -> ``"AL"``)."""
    if not postcode:
        return None
    match = AREA_PATTERN.match(postcode.strip())
    return match.group(1).upper() if match else None


def leading_prefixes(postcode: Optional[str]) -> tuple[str, ...]:
    """One- and two-letter leading prefixes a trainer's service prefix may equal.

    Examples:
        >>> leading_prefixes("SW1A 1AA")
        ('S', 'SW')
        >>> leading_prefixes("m1 1ae")
        ('M',)
    """
    area = postcode_area(postcode)
    if area is None:
        return ()
    return tuple(area[:n] for n in range(1, len(area) + 1))


def region_from_postcode(postcode: Optional[str]) -> Optional[str]:
    """County / region for a postcode's area, or None when unknown."""
    area = postcode_area(postcode)
    if area is None:
        return None
    return REGION_BY_AREA.get(area)
