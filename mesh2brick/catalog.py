"""Parts catalog records and the ordered footprint list used for placement.

:func:`allowed_footprints` turns catalog records into placement priority:

1. Only active records.
2. Only the standard full-brick category (``"Bricks"`` by default; compared
   case-insensitively after trimming).  Plates, tiles, slopes and other
   specialty categories drop out here.
3. Only one-layer-high records: the height classification must parse to
   exactly 1 (``"1"``, ``"1.0"``, ``" 1 "``; not ``"1/3"`` or ``"2"``).
4. The ``1x2`` orientation is re-expressed as ``2x1``.
5. Deduplicate and sort by (area, width, depth), all descending.

:func:`load_catalog_csv` reads the records from a CSV file; all row-level
parsing and validation lives there.
"""

from __future__ import annotations

import csv
import logging
import numbers
from dataclasses import dataclass
from fractions import Fraction
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .errors import CatalogError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_CATEGORY",
    "FORBIDDEN_FOOTPRINT",
    "FALLBACK_FOOTPRINT",
    "REQUIRED_HEADERS",
    "Footprint",
    "CatalogPart",
    "allowed_footprints",
    "load_catalog_csv",
    "load_default_catalog",
    "footprints_from_csv",
]

DEFAULT_CATEGORY = "Bricks"

REQUIRED_HEADERS = ("stud_x", "stud_y", "height_units", "active")
_CATEGORY_HEADERS = ("category_name", "category")


# ===========================================================================
# Records
# ===========================================================================

@dataclass(frozen=True)
class Footprint:
    """One placement orientation: *width* cells along X, *depth* along Y."""

    width: int
    depth: int

    def __post_init__(self) -> None:
        for name in ("width", "depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(f"Footprint {name} must be an integer, got {value!r}")
            object.__setattr__(self, name, int(value))
        if self.width <= 0 or self.depth <= 0:
            raise ValueError(f"Dimensions must be positive: {self.width}x{self.depth}")

    @property
    def area(self) -> int:
        return self.width * self.depth

    def rotated(self) -> Footprint:
        return Footprint(self.depth, self.width)

    def priority_key(self) -> tuple:
        """Sort key: larger area first, then wider, then deeper."""
        return (-self.area, -self.width, -self.depth)

    def __str__(self) -> str:
        return f"{self.width}x{self.depth}"


FORBIDDEN_FOOTPRINT = Footprint(1, 2)
FALLBACK_FOOTPRINT  = Footprint(1, 1)


@dataclass(frozen=True)
class CatalogPart:
    """A catalog row as far as footprint derivation is concerned."""

    stud_x: int
    stud_y: int
    height_units: str
    category_name: str
    active: bool
    part_id: str = ""
    name: str = ""

    @property
    def footprint(self) -> Footprint:
        return Footprint(self.stud_x, self.stud_y)


def _is_one_layer(height_units: Optional[str]) -> bool:
    if height_units is None:
        return False
    try:
        return Fraction(str(height_units).strip()) == 1
    except (ValueError, ZeroDivisionError):
        return False


def _normalize_category(label: Optional[str]) -> str:
    return (label or "").strip().casefold()


# ===========================================================================
# Footprint derivation
# ===========================================================================

def allowed_footprints(
    parts: Iterable[CatalogPart],
    *,
    category: str = DEFAULT_CATEGORY,
) -> List[Footprint]:
    """Derive the deduplicated, priority-ordered footprint list.

    Parameters
    ----------
    parts:
        Catalog records, typically from :func:`load_catalog_csv`.
    category:
        The standard full-brick category label.

    Returns
    -------
    list of Footprint
        Sorted by area, width, depth (all descending).  Never contains
        ``1x2``; always contains ``1x1``.

    Raises
    ------
    CatalogError
        If no record survives filtering (the message names the filter that
        removed the last ones) or if the ``1x1`` fallback is missing.
    """
    parts  = list(parts)
    wanted = _normalize_category(category)

    active    = [p for p in parts if p.active]
    in_cat    = [p for p in active if _normalize_category(p.category_name) == wanted]
    one_layer = [p for p in in_cat if _is_one_layer(p.height_units)]

    if not one_layer:
        if not parts:
            reason = "the catalog is empty"
        elif not active:
            reason = f"none of {len(parts)} records is active"
        elif not in_cat:
            reason = f"none of {len(active)} active records has category {category!r}"
        else:
            reason = (
                f"none of {len(in_cat)} active {category!r} records has a "
                f"height classification of one layer"
            )
        raise CatalogError(f"No valid brick footprints found in catalog: {reason}")

    unique = set()
    for part in one_layer:
        fp = part.footprint
        if fp == FORBIDDEN_FOOTPRINT:
            fp = fp.rotated()
        unique.add(fp)

    if FALLBACK_FOOTPRINT not in unique:
        raise CatalogError(
            "Catalog has no 1x1 footprint among eligible records; "
            "placement needs it as the guaranteed fallback"
        )

    ordered = sorted(unique, key=Footprint.priority_key)
    logger.debug(
        "Footprints from %d records (%d eligible): %s",
        len(parts), len(one_layer), ", ".join(map(str, ordered)),
    )
    return ordered


# ===========================================================================
# CSV loading
# ===========================================================================

def _parse_positive_int(value: str, column: str, row: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise CatalogError(f"Row {row}: {column} must be an integer, got {value!r}") from None
    if number <= 0:
        raise CatalogError(f"Row {row}: {column} must be > 0, got {number}")
    return number


def _parse_active(value: str, row: int) -> bool:
    text = (value or "").strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise CatalogError(
        f"Row {row}: active must be 'true' or 'false', got {value!r}"
    )


def _read_parts(lines: Iterable[str], source: str) -> List[CatalogPart]:
    reader  = csv.DictReader(lines)
    headers = {h.strip() for h in (reader.fieldnames or []) if h is not None}

    missing = [h for h in REQUIRED_HEADERS if h not in headers]
    category_col = next((h for h in _CATEGORY_HEADERS if h in headers), None)
    if category_col is None:
        missing.append(" or ".join(_CATEGORY_HEADERS))
    if missing:
        raise CatalogError(
            f"Catalog {source} missing required headers: {', '.join(missing)} "
            f"(found: {', '.join(sorted(headers)) or 'none'})"
        )

    parts: List[CatalogPart] = []
    # Row 1 is the header line.
    for row_number, raw in enumerate(reader, start=2):
        row = {k.strip(): (v or "").strip() for k, v in raw.items() if k is not None}
        parts.append(CatalogPart(
            stud_x=_parse_positive_int(row["stud_x"], "stud_x", row_number),
            stud_y=_parse_positive_int(row["stud_y"], "stud_y", row_number),
            height_units=row["height_units"],
            category_name=row[category_col],
            active=_parse_active(row["active"], row_number),
            part_id=row.get("part_id", ""),
            name=row.get("name", ""),
        ))
    logger.debug("Loaded %d catalog records from %s", len(parts), source)
    return parts


def load_catalog_csv(path: Union[str, Path]) -> List[CatalogPart]:
    """Read catalog records from a CSV file with a header row.

    Required columns are ``stud_x``, ``stud_y``, ``height_units``,
    ``active`` and one of ``category_name`` / ``category``.  Inactive rows
    are returned too; :func:`allowed_footprints` filters them.

    Raises
    ------
    CatalogError
        On missing headers or an unparsable row.
    """
    path = Path(path)
    with path.open(newline="", encoding="utf-8") as fh:
        return _read_parts(fh, str(path))


def load_default_catalog() -> List[CatalogPart]:
    """Records from the catalog bundled with the package."""
    text = resources.files("mesh2brick").joinpath("data/default_catalog.csv").read_text(
        encoding="utf-8"
    )
    return _read_parts(text.splitlines(), "default_catalog.csv")


def footprints_from_csv(
    path: Union[str, Path, None] = None,
    *,
    category: str = DEFAULT_CATEGORY,
) -> List[Footprint]:
    """Convenience: load a CSV (or the bundled catalog) and derive footprints."""
    parts: Sequence[CatalogPart] = (
        load_default_catalog() if path is None else load_catalog_csv(path)
    )
    return allowed_footprints(parts, category=category)
