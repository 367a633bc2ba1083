"""
optimizer.py
Normalizes ads.txt content: drops invalid lines and duplicates, groups variables
by type and records by ad system, and writes one header comment per group.
Running it on its own output returns the same text.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .models import DIRECT, AdsTxtRecord, AdsTxtVariable, is_ads_txt_record, is_ads_txt_variable
from .parser import default_owner_domain, parse_ads_txt_line

logger = logging.getLogger(__name__)

RECORDS_HEADER = "# Advertising System Records"


def variables_header(variable_type: str) -> str:
    return f"# {variable_type} Variables"


def _is_generated_header(line: str) -> bool:
    s = line.strip()
    return s == RECORDS_HEADER or (s.startswith("# ") and s.endswith(" Variables"))


def format_record(record: AdsTxtRecord) -> str:
    line = f"{record.domain}, {record.account_id}, {record.relationship}"
    if record.certification_authority_id:
        line += f", {record.certification_authority_id}"
    return line


def optimize_ads_txt(content: str, publisher_domain: Optional[str] = None) -> str:
    lines = (content or "").split("\n")
    header = None
    if lines and lines[0].strip().startswith("#") and not _is_generated_header(lines[0]):
        header = lines[0]

    variables: Dict[str, AdsTxtVariable] = {}
    records: Dict[str, AdsTxtRecord] = {}
    for index, line in enumerate(lines, start=1):
        entry = parse_ads_txt_line(line, index)
        if entry is None or not entry.is_valid:
            continue
        if is_ads_txt_variable(entry):
            variables.setdefault(f"{entry.variable_type}|{entry.value.lower()}", entry)
        elif is_ads_txt_record(entry):
            records.setdefault(entry.lookup_key(), entry)

    if publisher_domain and not any(v.variable_type == "OWNERDOMAIN" for v in variables.values()):
        owner = default_owner_domain(publisher_domain)
        if owner:
            variables[f"OWNERDOMAIN|{owner.value.lower()}"] = owner

    out: List[str] = []
    if header is not None:
        out += [header, ""]

    by_type: Dict[str, List[AdsTxtVariable]] = {}
    for v in variables.values():
        by_type.setdefault(v.variable_type, []).append(v)
    for variable_type in sorted(by_type):
        out.append(variables_header(variable_type))
        out += [f"{v.variable_type}={v.value}" for v in by_type[variable_type]]
        out.append("")

    out.append(RECORDS_HEADER)
    by_domain: Dict[str, List[AdsTxtRecord]] = {}
    for r in records.values():
        by_domain.setdefault(r.domain.lower().strip(), []).append(r)
    for domain in sorted(by_domain):
        group = sorted(by_domain[domain], key=lambda r: (r.relationship != DIRECT, r.account_id))
        out += [format_record(r) for r in group]

    logger.debug("Optimized ads.txt: %d variables, %d records", len(variables), len(records))
    return "\n".join(out)
