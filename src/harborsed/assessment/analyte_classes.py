"""
Centralized analyte classification for sediment contaminant data.

- ANALYTE_CATEGORY_BY_NAME maps each analyte label to its category
  ("PCB", "PAH", "Metal", "Pesticide").
- category_map() builds a new read-only mapping with caller overrides; the
  module-level mapping itself is never modified.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

PCB = "PCB"
PAH = "PAH"
METAL = "Metal"
PESTICIDE = "Pesticide"
OTHER = "Other"

# NOAA Status & Trends congener list
_PCB_CONGENERS = [8, 18, 28, 44, 52, 66, 101, 105, 118, 128, 138, 153, 170, 180, 187, 195, 206, 209]

_CATEGORY_BY_NAME = {
    # Metals
    "Ag": METAL,
    "As": METAL,
    "Cd": METAL,
    "Cr": METAL,
    "Cu": METAL,
    "Hg": METAL,
    "Ni": METAL,
    "Pb": METAL,
    "Zn": METAL,

    # Low molecular weight PAHs
    "Naphthalene": PAH,
    "2-Methylnaphthalene": PAH,
    "Acenaphthylene": PAH,
    "Acenaphthene": PAH,
    "Fluorene": PAH,
    "Phenanthrene": PAH,
    "Anthracene": PAH,

    # High molecular weight PAHs
    "Fluoranthene": PAH,
    "Pyrene": PAH,
    "Benz(a)anthracene": PAH,
    "Chrysene": PAH,
    "Benzo(b)fluoranthene": PAH,
    "Benzo(k)fluoranthene": PAH,
    "Benzo(a)pyrene": PAH,
    "Indeno(1,2,3-cd)pyrene": PAH,
    "Dibenz(a,h)anthracene": PAH,
    "Benzo(g,h,i)perylene": PAH,

    # Organochlorine pesticides
    "p,p'-DDT": PESTICIDE,
    "p,p'-DDE": PESTICIDE,
    "p,p'-DDD": PESTICIDE,
    "o,p'-DDT": PESTICIDE,
    "o,p'-DDE": PESTICIDE,
    "o,p'-DDD": PESTICIDE,
    "Aldrin": PESTICIDE,
    "Dieldrin": PESTICIDE,
    "Endrin": PESTICIDE,
    "alpha-Chlordane": PESTICIDE,
    "gamma-Chlordane": PESTICIDE,
    "Heptachlor": PESTICIDE,
    "Heptachlor Epoxide": PESTICIDE,
    "Lindane": PESTICIDE,
    "Mirex": PESTICIDE,
    "HCB": PESTICIDE,
}
_CATEGORY_BY_NAME.update({f"PCB {n}": PCB for n in _PCB_CONGENERS})

ANALYTE_CATEGORY_BY_NAME: Mapping[str, str] = MappingProxyType(_CATEGORY_BY_NAME)


def category_map(overrides: Optional[Mapping[str, str]] = None, *, replace: bool = False) -> Mapping[str, str]:
    """Return a read-only analyte -> category mapping.

    - replace=False (default): ANALYTE_CATEGORY_BY_NAME updated with `overrides`.
    - replace=True: `overrides` alone.
    """
    base = {} if replace else dict(ANALYTE_CATEGORY_BY_NAME)
    base.update(dict(overrides or {}))
    return MappingProxyType(base)


def get_category(name: str, *, category_by_name: Optional[Mapping[str, str]] = None, default: str = OTHER) -> str:
    """Category for an analyte label, `default` when unknown."""
    m = category_by_name if category_by_name is not None else ANALYTE_CATEGORY_BY_NAME
    return m.get(name, default)


def analytes_in_category(
    category: str,
    names: Iterable[str],
    *,
    category_by_name: Optional[Mapping[str, str]] = None,
) -> list[str]:
    """Subset of `names` (order kept, duplicates dropped) belonging to `category`."""
    seen = dict.fromkeys(names)
    return [n for n in seen if get_category(n, category_by_name=category_by_name) == category]
