"""Postcode range expansion and eligibility category resolution."""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable
from typing import Any

import structlog

from job_counter_core.constants import (
    ALL_SENTINEL,
    NORTHERN_AUSTRALIA,
    REGIONAL_AUSTRALIA,
    REGIONAL_AUSTRALIA_FLAT,
    REMOTE_VERY_REMOTE_BY_STATE,
    REMOTE_VERY_REMOTE_FLAT,
    TOURISM_EXTRA_POSTCODES,
)
from job_counter_core.exceptions import ValidationError

logger = structlog.get_logger()

_RANGE_TOKEN = re.compile(r"^(\d{1,4})(?:\s*-\s*(\d{1,4}))?$")
_POSTCODE = re.compile(r"^\d{1,4}$")

# Categories whose per-region tokens are expanded, and the flat field each feeds
_EXPANDED_CATEGORIES: list[tuple[str, str]] = [
    (REGIONAL_AUSTRALIA, REGIONAL_AUSTRALIA_FLAT),
    (REMOTE_VERY_REMOTE_BY_STATE, REMOTE_VERY_REMOTE_FLAT),
]


def expand_token(token: object) -> set[str]:
    """Expand one range token ("2311-2312" or "3139") to zero-padded postcodes."""
    match = _RANGE_TOKEN.match(_token_text(token))
    if match is None:
        msg = f"Malformed range token {token!r}"
        raise ValidationError(msg)

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) is not None else start
    if end < start:
        msg = f"Reversed range token {token!r}: {end} < {start}"
        raise ValidationError(msg)
    return {f"{n:04d}" for n in range(start, end + 1)}


def expand_ranges(tokens: Iterable[object]) -> set[str]:
    """Expand a region's range tokens, ignoring the ALL sentinel."""
    out: set[str] = set()
    for token in tokens:
        if token == ALL_SENTINEL:
            continue
        out |= expand_token(token)
    return out


def normalise_postcode(value: object) -> str:
    """Validate a literal postcode and zero-pad it to 4 digits."""
    raw = _token_text(value)
    if not _POSTCODE.match(raw):
        msg = f"Malformed postcode {value!r}"
        raise ValidationError(msg)
    return raw.zfill(4)


def resolve_with_gaps(rules_doc: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Resolve the derived flat sets and report regions left unexpanded.

    Returns a new document; the input is not mutated. Gaps are
    "category/region" strings for every region carrying the ALL sentinel.
    """
    resolved = copy.deepcopy(rules_doc)
    definitions = _definitions(resolved)
    gaps: list[str] = []

    flats: dict[str, set[str]] = {}
    for category, flat_field in _EXPANDED_CATEGORIES:
        flats[flat_field] = _expand_category(definitions, category, gaps)

    # Tourism-designated postcodes are always remote/very remote for this program
    flats[REMOTE_VERY_REMOTE_FLAT] |= set(tourism_postcodes(resolved))

    for flat_field, postcodes in flats.items():
        definitions[flat_field] = sorted(postcodes)

    logger.info(
        "rules_resolved",
        regional=len(definitions[REGIONAL_AUSTRALIA_FLAT]),
        remote_very_remote=len(definitions[REMOTE_VERY_REMOTE_FLAT]),
        unresolved_regions=len(gaps),
    )
    return resolved, gaps


def resolve(rules_doc: dict[str, Any]) -> dict[str, Any]:
    """Return the rules document with its derived flat sets replaced."""
    resolved, _ = resolve_with_gaps(rules_doc)
    return resolved


def northern_postcodes(rules_doc: dict[str, Any]) -> list[str]:
    """Northern Australia postcodes, held as a bare list or under "postcodes"."""
    value = _definitions(rules_doc).get(NORTHERN_AUSTRALIA)
    if isinstance(value, dict):
        value = value.get("postcodes")
    if not isinstance(value, list):
        msg = f"{NORTHERN_AUSTRALIA} must be a postcode list"
        raise ValidationError(msg)
    return [normalise_postcode(p) for p in value]


def tourism_postcodes(rules_doc: dict[str, Any]) -> list[str]:
    """Tourism special-case postcodes."""
    value = _definitions(rules_doc).get(TOURISM_EXTRA_POSTCODES)
    if not isinstance(value, list):
        msg = f"{TOURISM_EXTRA_POSTCODES} must be a postcode list"
        raise ValidationError(msg)
    return [normalise_postcode(p) for p in value]


def postcode_universe(rules_doc: dict[str, Any]) -> list[str]:
    """Sorted union of every eligibility category's postcodes.

    Requires the flat sets to be present; run resolve() first.
    """
    definitions = _definitions(rules_doc)
    universe: set[str] = set(northern_postcodes(rules_doc))
    for _, flat_field in _EXPANDED_CATEGORIES:
        flat = definitions.get(flat_field)
        if not isinstance(flat, list):
            msg = f"{flat_field} is missing; resolve the rules document first"
            raise ValidationError(msg)
        universe.update(normalise_postcode(p) for p in flat)
    universe.update(tourism_postcodes(rules_doc))
    return sorted(universe)


def _token_text(value: object) -> str:
    """String form of a JSON token; anything but a string or integer is malformed."""
    if isinstance(value, bool) or not isinstance(value, str | int):
        return ""
    return str(value).strip()


def _definitions(rules_doc: dict[str, Any]) -> dict[str, Any]:
    """Return the document's definitions mapping."""
    definitions = rules_doc.get("definitions") if isinstance(rules_doc, dict) else None
    if not isinstance(definitions, dict):
        msg = "Rules document has no 'definitions' mapping"
        raise ValidationError(msg)
    return definitions


def _expand_category(definitions: dict[str, Any], category: str, gaps: list[str]) -> set[str]:
    """Expand every region of one category into a single postcode set."""
    regions = definitions.get(category)
    if not isinstance(regions, dict):
        msg = f"Category {category!r} must map regions to range tokens"
        raise ValidationError(msg)

    out: set[str] = set()
    for region, tokens in regions.items():
        if tokens is None:
            # A null region lists no postcodes yet
            continue
        if tokens == ALL_SENTINEL:
            tokens = [ALL_SENTINEL]
        if not isinstance(tokens, list):
            msg = f"{category}/{region} must be a list of range tokens"
            raise ValidationError(msg)
        if ALL_SENTINEL in tokens:
            gaps.append(f"{category}/{region}")
            logger.warning("region_unresolved", category=category, region=region)
        try:
            out |= expand_ranges(tokens)
        except ValidationError as e:
            msg = f"{category}/{region}: {e}"
            raise ValidationError(msg) from e
    return out


def unresolved_regions(rules_doc: dict[str, Any]) -> list[str]:
    """List the category/region pairs carrying the ALL sentinel, without expanding."""
    definitions = _definitions(rules_doc)
    gaps: list[str] = []
    for category, _ in _EXPANDED_CATEGORIES:
        regions = definitions.get(category)
        if not isinstance(regions, dict):
            continue
        for region, tokens in regions.items():
            if tokens == ALL_SENTINEL or (isinstance(tokens, list) and ALL_SENTINEL in tokens):
                gaps.append(f"{category}/{region}")
    return gaps
