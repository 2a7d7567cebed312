"""walking the region hierarchy through a RegionStore"""

from typing import List, Optional, Set

from regionwatch.models.region import Region, RegionType
from regionwatch.core.regionstores import RegionStore
from regionwatch.utils.constants import NO_REGION


def normalize_region_id(region_id: Optional[str]) -> Optional[str]:
    """None, "" and the legacy "none" marker all mean no region"""
    if not region_id or region_id == NO_REGION:
        return None
    return region_id


def parent_id_of(region: Region) -> Optional[str]:
    """the parent's id, or None for a root"""
    if region.kind == RegionType.COUNTRY:
        return None
    return normalize_region_id(region.parent_id)


def ancestors_of(region_store: RegionStore, region: Region) -> List[Region]:
    """
    the chain of ancestors from the region's parent up to the root, nearest first.
    the walk stops at the first parent id which cannot be resolved
    """
    ancestors = []
    seen = {region.id}
    parent_id = parent_id_of(region)
    while parent_id is not None and parent_id not in seen:
        parent = region_store.find_by_id(parent_id)
        if parent is None:
            break
        ancestors.append(parent)
        seen.add(parent.id)
        parent_id = parent_id_of(parent)
    return ancestors


def lineage_of(region_store: RegionStore, region: Region) -> List[Region]:
    """root first, ending with the region itself"""
    return list(reversed(ancestors_of(region_store, region))) + [region]


def subtree_postorder(region_store: RegionStore, root: Region) -> List[Region]:
    """
    the root and all its descendants, every child listed before its parent.
    a region reachable twice is listed once
    """
    ordered: List[Region] = []
    visited: Set[str] = set()

    # iterative post-order: (region, children_expanded)
    stack = [(root, False)]
    while stack:
        region, expanded = stack.pop()
        if expanded:
            ordered.append(region)
            continue
        if region.id in visited:
            continue
        visited.add(region.id)
        stack.append((region, True))
        if region.kind != RegionType.DISTRICT:
            for child in reversed(region_store.find_children(region.id)):
                if child.id not in visited:
                    stack.append((child, False))
    return ordered


def subtree_preorder(region_store: RegionStore, root: Region) -> List[Region]:
    """the root and all its descendants, every parent listed before its children"""
    # every parent follows all of its children in post-order, so reversing gives
    # a parent-first order
    return list(reversed(subtree_postorder(region_store, root)))
