"""
duplicates.py
Flags submitted records that the publisher's current ads.txt already carries.

Key: lower(domain) | account_id | relationship. Account ids stay case-sensitive.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .models import AdsTxtRecord, Severity, ValidationKey, ValidationWarning, is_ads_txt_record, with_warnings
from .parser import parse_ads_txt_content

logger = logging.getLogger(__name__)


def existing_record_keys(cached_content: str) -> Dict[str, AdsTxtRecord]:
    lookup = {}
    for entry in parse_ads_txt_content(cached_content):
        if is_ads_txt_record(entry) and entry.is_valid:
            lookup[entry.lookup_key()] = entry
    return lookup


def detect_duplicates(publisher_domain: str, new_records: List[AdsTxtRecord],
                      cached_content: Optional[str]) -> List[AdsTxtRecord]:
    if not cached_content:
        return new_records

    lookup = existing_record_keys(cached_content)
    logger.info("Checking %d records for duplicates against %d existing records", len(new_records), len(lookup))

    out = []
    for record in new_records:
        if record.is_valid and record.lookup_key() in lookup:
            logger.debug("Already implemented: %s", record.lookup_key())
            warning = ValidationWarning(ValidationKey.IMPLIMENTED, {"domain": publisher_domain}, Severity.INFO)
            record = with_warnings(record, [warning], duplicate_domain=publisher_domain)
        out.append(record)

    logger.info("After duplicate check: %d records, %d with warnings",
                len(out), sum(1 for r in out if r.has_warning))
    return out
