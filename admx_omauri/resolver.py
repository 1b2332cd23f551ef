# (C) 2025 Noverse. All Rights Reserved.
# https://github.com/nohuto
# https://discord.gg/E2ybG4j9jU

import logging
from typing import Dict, Iterable

from .documents import AdmxDocument, Category

LOG = logging.getLogger("admx_omauri")
CategoryAreaMap = Dict[str, str]

def resolve(document: AdmxDocument) -> CategoryAreaMap:
    """Map every category of ``document`` to its OMA-URI area name segment.

    Only one level of ancestry is used: a grandchild category is rendered as
    ``{App}~Policy~{parent}~{name}`` with the parent's raw identifier, not the
    parent's own expanded path.
    """
    try:
        parent_map = build_parent_map(document.categories)
        return expand_area_names(parent_map, document.app_name)
    except Exception as exc:
        LOG.warning(f"{document.source}: unable to resolve categories: {exc}")
        return {}

def build_parent_map(categories: Iterable[Category]) -> Dict[str, str]:
    parent_map: Dict[str, str] = {}
    for category in categories:
        try:
            if not category.name:
                raise ValueError("category has no name")
            parent_map[category.name] = category.parent or category.name
        except Exception as exc:
            LOG.warning(f"Skipping category {category!r}: {exc}")

    # parents declared outside the visible category set become roots
    for parent in list(parent_map.values()):
        if parent not in parent_map:
            LOG.debug(f"Treating undeclared parent category '{parent}' as a root")
            parent_map[parent] = parent
    return parent_map

def expand_area_names(parent_map: Dict[str, str], app_name: str) -> CategoryAreaMap:
    area_map: CategoryAreaMap = {}
    for name, parent in parent_map.items():
        if parent == name:
            area_map[name] = f"{app_name}~Policy~{name}"
        else:
            area_map[name] = f"{app_name}~Policy~{parent}~{name}"
    return area_map
