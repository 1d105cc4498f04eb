"""Shared constants for job-counter."""

from __future__ import annotations

# Rules document keys
NORTHERN_AUSTRALIA = "northernAustralia"
REGIONAL_AUSTRALIA = "regionalAustralia"
REMOTE_VERY_REMOTE_BY_STATE = "remoteVeryRemoteByState"
TOURISM_EXTRA_POSTCODES = "tourismExtraPostcodes"
REGIONAL_AUSTRALIA_FLAT = "regionalAustraliaFlat"
REMOTE_VERY_REMOTE_FLAT = "remoteVeryRemoteFlat"

# Region token meaning "every postcode in the state/territory".
# Not expanded: there is no postcode-to-region reference table here.
ALL_SENTINEL = "ALL"

# Industry keyword groups for subclass 462 specified work.
# Each group is OR-ed into a single search query.
DEFAULT_KEYWORD_GROUPS: dict[str, list[str]] = {
    "tourism_hospitality": [
        "hotel",
        "hostel",
        "motel",
        "resort",
        "reception",
        "housekeeping",
        "bar",
        "restaurant",
        "cafe",
        "chef",
        "cook",
        "waiter",
        "bartender",
        "tour",
        "guide",
        "museum",
        "gallery",
    ],
    "plant_animal_cultivation": [
        "farm",
        "orchard",
        "harvest",
        "picker",
        "packing",
        "vineyard",
        "pruning",
        "vegetable",
        "fruit",
        "cattle",
        "shear",
        "dairy",
    ],
    "construction": [
        "construction",
        "labourer",
        "carpenter",
        "plumber",
        "electrician",
        "painter",
        "tiler",
        "bricklayer",
        "concretor",
        "scaffolder",
    ],
    "fishing_pearling_forestry": [
        "fishing",
        "deckhand",
        "pearling",
        "forestry",
        "logging",
        "tree felling",
    ],
    "disaster_recovery": [
        "recovery",
        "disaster",
        "clean-up",
        "restoration",
        "reconstruction",
    ],
}

# Workforce Australia "Job Age" filter options, narrowest first: (max days, label)
JOB_AGE_OPTIONS: list[tuple[int, str]] = [
    (3, "Past 3 days"),
    (7, "Past week"),
    (14, "Past fortnight"),
]

DEFAULT_SEARCH_URL = "https://www.workforceaustralia.gov.au/individuals/jobs/search"
DEFAULT_SOURCE_NAME = "Workforce Australia"
