# (C) 2025 Noverse. All Rights Reserved.
# https://github.com/nohuto
# https://discord.gg/E2ybG4j9jU

import json, logging
from collections import Counter
from pathlib import Path
from typing import Dict, List, Sequence

import xlsxwriter
import yaml

from .extractor import SCOPE_DEVICE, SCOPE_USER, PolicyRecord

LOG = logging.getLogger("admx_omauri")
OUTPUT_EXTENSIONS = {"json": ".json", "yaml": ".yaml", "xlsx": ".xlsx"}
WORKSHEET_COLUMNS = (
    ("Name", "name", 40),
    ("OMA-URI", "omauri", 90),
    ("Value", "value", 50),
    ("Help", "help", 80),
)

def partition_by_scope(records: Sequence[PolicyRecord]) -> Dict[str, List[PolicyRecord]]:
    partitions: Dict[str, List[PolicyRecord]] = {SCOPE_USER: [], SCOPE_DEVICE: []}
    for record in records:
        partitions.setdefault(record.scope, []).append(record)
    return partitions

def summarize(records: Sequence[PolicyRecord]) -> str:
    counter = Counter(record.scope for record in records)
    return ", ".join(f"{key}: {counter[key]}" for key in sorted(counter.keys()))

def serialize(records: Sequence[PolicyRecord], *, fmt: str, pretty: bool = True) -> str:
    payload = [record.to_dict() for record in records]
    if fmt == "yaml":
        return yaml.safe_dump(
            payload,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    if not pretty:
        return json.dumps(payload)
    return json.dumps(payload, indent=2)

def write_workbook(path: Path, records: Sequence[PolicyRecord]) -> None:
    """Write one worksheet per scope, ``user`` first, then ``device``."""
    workbook = xlsxwriter.Workbook(str(path))
    try:
        header_format = workbook.add_format({"bold": True, "border": 1})
        cell_format = workbook.add_format({"valign": "top", "text_wrap": True})
        for scope, scope_records in partition_by_scope(records).items():
            worksheet = workbook.add_worksheet(scope)
            for col, (header, _, width) in enumerate(WORKSHEET_COLUMNS):
                worksheet.write(0, col, header, header_format)
                worksheet.set_column(col, col, width)
            for row, record in enumerate(scope_records, 1):
                for col, (_, attribute, _) in enumerate(WORKSHEET_COLUMNS):
                    if worksheet.write_string(row, col, getattr(record, attribute), cell_format) == -2:
                        LOG.warning(f"{scope}: {attribute} of policy '{record.name}' was truncated to the Excel cell limit")
            worksheet.freeze_panes(1, 0)
            worksheet.autofilter(0, 0, len(scope_records), len(WORKSHEET_COLUMNS) - 1)
    finally:
        workbook.close()

def write_payload(path: Path, records: Sequence[PolicyRecord], *, fmt: str, pretty: bool = True) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "xlsx":
        write_workbook(path, records)
        return
    path.write_text(serialize(records, fmt=fmt, pretty=pretty), encoding="utf-8")
