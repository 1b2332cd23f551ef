# (C) 2025 Noverse. All Rights Reserved.
# https://github.com/nohuto
# https://discord.gg/E2ybG4j9jU

from .documents import AdmlDocument, AdmxDocument, Category, DocumentError, EnumItem, Enumeration, Policy, load_adml, load_admx
from .extractor import PolicyExtractor, PolicyRecord, extract
from .resolver import CategoryAreaMap, resolve

__all__ = [
    "AdmlDocument",
    "AdmxDocument",
    "Category",
    "CategoryAreaMap",
    "DocumentError",
    "EnumItem",
    "Enumeration",
    "Policy",
    "PolicyExtractor",
    "PolicyRecord",
    "extract",
    "load_adml",
    "load_admx",
    "resolve",
]
