# (C) 2025 Noverse. All Rights Reserved.
# https://github.com/nohuto
# https://discord.gg/E2ybG4j9jU

import io, logging, re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, cast
from xml.etree import ElementTree as et

LOG = logging.getLogger("admx_omauri")
UNICODE_ENCODING_PATTERN = re.compile(br"encoding\s*=\s*(?P<quote>['\"])unicode(?P=quote)", re.IGNORECASE)
UNICODE_ENCODING_TEXT_PATTERN = re.compile(r"encoding\s*=\s*(?P<quote>['\"])unicode(?P=quote)", re.IGNORECASE)
NUMERIC_VALUE_TAGS = ("decimal", "longDecimal")

class DocumentError(ValueError):
    """Raised when an ADMX or ADML file cannot be turned into a document."""

@dataclass(frozen=True)
class Category:
    name: str
    parent: Optional[str] = None

@dataclass(frozen=True)
class EnumItem:
    decimal: Optional[str] = None
    string: Optional[str] = None

@dataclass(frozen=True)
class Enumeration:
    value_name: str
    items: Tuple[EnumItem, ...] = ()

@dataclass(frozen=True)
class Policy:
    name: str
    policy_class: str
    parent_category: Optional[str] = None
    explain_text: Optional[str] = None
    enumerations: Tuple[Enumeration, ...] = ()

@dataclass(frozen=True)
class AdmxDocument:
    app_name: str
    categories: Tuple[Category, ...] = ()
    policies: Tuple[Policy, ...] = ()
    source: str = ""

@dataclass(frozen=True)
class AdmlDocument:
    strings: Dict[str, str] = field(default_factory=dict)
    source: str = ""

def _load_xml_tree(path: Path) -> "et.ElementTree[Any]":
    try:
        return et.parse(path)
    except LookupError:
        raw = path.read_bytes()
        fixed = _normalize_unicode_encoding(raw)
        if fixed is not None:
            return et.parse(io.BytesIO(fixed))
        raise

def _normalize_unicode_encoding(raw: bytes) -> Optional[bytes]:
    if UNICODE_ENCODING_PATTERN.search(raw):
        def repl(match: re.Match[bytes]) -> bytes:
            quote = match.group("quote")
            return b"encoding=" + quote + b"utf-16" + quote

        return UNICODE_ENCODING_PATTERN.sub(repl, raw, count=1)

    for encoding in ("utf-16", "utf-16-le", "utf-16-be"):
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError:
            continue
        if UNICODE_ENCODING_TEXT_PATTERN.search(text):
            def repl_text(match: re.Match[str]) -> str:
                quote = match.group("quote")
                return f"encoding={quote}utf-16{quote}"

            text = UNICODE_ENCODING_TEXT_PATTERN.sub(repl_text, text, count=1)
            return text.encode(encoding)
    return None

def _read_root(path: Path) -> et.Element:
    if not path.is_file():
        raise FileNotFoundError(f"'{path}' was not found.")
    try:
        tree = _load_xml_tree(path)
    except et.ParseError as exc:
        raise DocumentError(f"Unable to parse {path.name}: {exc}") from exc
    except LookupError as exc:
        raise DocumentError(f"Unsupported encoding in {path.name}: {exc}") from exc
    return cast(et.Element, tree.getroot())

def load_admx(path: Path) -> AdmxDocument:
    return parse_admx(_read_root(path), source=path.name)

def load_adml(path: Path) -> AdmlDocument:
    return parse_adml(_read_root(path), source=path.name)

def parse_admx(root: et.Element, *, source: str = "") -> AdmxDocument:
    namespace = _extract_namespace(root)
    q = lambda tag: f"{{{namespace}}}{tag}" if namespace else tag

    app_name = ""
    policy_namespaces = root.find(q("policyNamespaces"))
    if policy_namespaces is not None:
        target_node = policy_namespaces.find(q("target"))
        if target_node is not None:
            app_name = target_node.get("prefix", "")
    if not app_name:
        LOG.warning(f"{source or 'ADMX'}: no policyNamespaces target prefix declared")

    categories: List[Category] = []
    categories_node = root.find(q("categories"))
    if categories_node is not None:
        for node in categories_node.findall(q("category")):
            name = node.get("name", "")
            if not name:
                LOG.warning(f"{source}: skipping category without a name")
                continue
            parent = None
            parent_node = node.find(q("parentCategory"))
            if parent_node is not None and parent_node.get("ref"):
                parent = parent_node.get("ref")
            categories.append(Category(name=name, parent=parent))

    policies: List[Policy] = []
    policies_node = root.find(q("policies"))
    if policies_node is not None:
        for node in policies_node.findall(q("policy")):
            name = node.get("name", "")
            if not name:
                LOG.warning(f"{source}: skipping policy without a name")
                continue
            parent_category = None
            parent_node = node.find(q("parentCategory"))
            if parent_node is not None and parent_node.get("ref"):
                parent_category = parent_node.get("ref")
            policies.append(
                Policy(
                    name=name,
                    policy_class=node.get("class", ""),
                    parent_category=parent_category,
                    explain_text=node.get("explainText") or None,
                    enumerations=_parse_enumerations(node, q),
                )
            )

    LOG.debug(f"{source}: {len(categories)} categories, {len(policies)} policies")
    return AdmxDocument(
        app_name=app_name,
        categories=tuple(categories),
        policies=tuple(policies),
        source=source,
    )

def parse_adml(root: et.Element, *, source: str = "") -> AdmlDocument:
    namespace = _extract_namespace(root)
    q = lambda tag: f"{{{namespace}}}{tag}" if namespace else tag
    string_table = root.find(f".//{q('stringTable')}")
    if string_table is None:
        LOG.warning(f"{source or 'ADML'}: no stringTable found")
        return AdmlDocument(source=source)
    table: Dict[str, str] = {}
    for node in string_table.findall(q("string")):
        string_id = node.get("id")
        if not string_id:
            continue
        table[string_id] = (node.text or "").strip()
    return AdmlDocument(strings=table, source=source)

def _parse_enumerations(policy: et.Element, q) -> Tuple[Enumeration, ...]:
    elements_node = policy.find(q("elements"))
    if elements_node is None:
        return ()
    result: List[Enumeration] = []
    for element in elements_node.findall(q("enum")):
        items = tuple(_parse_enum_item(item, q) for item in element.findall(q("item")))
        result.append(Enumeration(value_name=element.get("valueName", ""), items=items))
    return tuple(result)

def _parse_enum_item(item: et.Element, q) -> EnumItem:
    value_node = item.find(q("value"))
    if value_node is None:
        return EnumItem()
    decimal = None
    for tag in NUMERIC_VALUE_TAGS:
        decimal_node = value_node.find(q(tag))
        if decimal_node is not None:
            decimal = decimal_node.get("value")
            break
    string = None
    string_node = value_node.find(q("string"))
    if string_node is not None:
        string = string_node.text or ""
    return EnumItem(decimal=decimal, string=string)

def _extract_namespace(node: Any) -> str:
    if "}" in node.tag:
        return node.tag.split("}", 1)[0].strip("{")
    return ""
