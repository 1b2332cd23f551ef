# (C) 2025 Noverse. All Rights Reserved.
# https://github.com/nohuto
# https://discord.gg/E2ybG4j9jU

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .documents import AdmlDocument, AdmxDocument, Enumeration, Policy
from .resolver import CategoryAreaMap

LOG = logging.getLogger("admx_omauri")
SCOPE_USER = "user"
SCOPE_DEVICE = "device"
ENABLED_PAYLOAD = "<enabled/>"
OMA_URI_TEMPLATE = "./{scope}/Vendor/MSFT/Policy/Config/{area}/{policy}"

# (scope, OMA-URI segment, class substrings that select it)
SCOPE_RULES: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    (SCOPE_USER, "User", ("User", "Both")),
    (SCOPE_DEVICE, "Device", ("Device", "Machine", "Both")),
)

@dataclass(frozen=True)
class PolicyRecord:
    name: str
    omauri: str
    value: str
    help: str
    scope: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

class PolicyExtractor:
    def __init__(self, adml: AdmlDocument, area_map: CategoryAreaMap) -> None:
        self.strings = adml.strings
        self.area_map = area_map

    def extract(self, document: AdmxDocument) -> List[PolicyRecord]:
        records: List[PolicyRecord] = []
        for policy in document.policies:
            try:
                policy_records = self._extract_policy(policy)
            except Exception as exc:
                LOG.warning(f"{document.source}: skipping policy '{policy.name}': {exc!r}")
                continue
            if not policy_records:
                LOG.debug(f"{document.source}: policy '{policy.name}' has unmatched class '{policy.policy_class}'")
            records.extend(policy_records)
        return records

    def _extract_policy(self, policy: Policy) -> List[PolicyRecord]:
        help_text = self._help_text(policy.explain_text)
        value = sample_payload(policy.enumerations)
        area = self.area_map[policy.parent_category or ""]
        return [
            PolicyRecord(
                name=policy.name,
                omauri=OMA_URI_TEMPLATE.format(scope=segment, area=area, policy=policy.name),
                value=value,
                help=help_text,
                scope=scope,
            )
            for scope, segment in match_scopes(policy.policy_class)
        ]

    def _help_text(self, explain_text: Optional[str]) -> str:
        string_id = explain_string_id(explain_text)
        if not string_id:
            return ""
        text = self.strings.get(string_id)
        if text is None:
            return ""
        return text.replace(",", " ")

def extract(admx: AdmxDocument, adml: AdmlDocument, area_map: CategoryAreaMap) -> List[PolicyRecord]:
    return PolicyExtractor(adml, area_map).extract(admx)

def explain_string_id(explain_text: Optional[str]) -> Optional[str]:
    """Return ``X`` for a reference such as ``$(string.X)``."""
    if not explain_text:
        return None
    start = explain_text.rfind(".") + 1
    end = explain_text.rfind(")")
    if end < start:
        end = len(explain_text)
    return explain_text[start:end] or None

def sample_payload(enumerations: Iterable[Enumeration]) -> str:
    lines = [ENABLED_PAYLOAD]
    for enumeration in enumerations:
        for value in _enumeration_values(enumeration):
            lines.append(f'<data id="{enumeration.value_name}" value="{value}"/>')
    return "\n".join(lines)

def _enumeration_values(enumeration: Enumeration) -> List[str]:
    # numeric items win; string items are ignored when any numeric item exists
    numeric = [item.decimal for item in enumeration.items if item.decimal is not None]
    if numeric:
        return [str(int(value)) for value in numeric]
    return [item.string for item in enumeration.items if item.string is not None]

def match_scopes(policy_class: str) -> List[Tuple[str, str]]:
    return [
        (scope, segment)
        for scope, segment, patterns in SCOPE_RULES
        if any(pattern in policy_class for pattern in patterns)
    ]
