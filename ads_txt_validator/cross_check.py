"""
cross_check.py
Cross-checks parsed ads.txt entries against the publisher's current ads.txt and the
sellers.json files of every advertising system the entries name.

Seller data is loaded once per distinct ad-system domain before any record is
validated; the per-domain tables are read-only from then on, so records are
validated independently of each other.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from .duplicates import detect_duplicates
from .models import AdsTxtRecord, is_ads_txt_record, is_ads_txt_variable
from .sellers import DomainSellers, SellerAccess, as_seller_access, load_domain_sellers
from .validator import extract_declared_domains, validate_relationship
from .warning_rules import apply_warnings, synthesize_warnings, validation_error_warning

logger = logging.getLogger(__name__)


def group_seller_ids(records: List[AdsTxtRecord]) -> Dict[str, List[str]]:
    """Distinct trimmed account ids per lower-cased ad-system domain, in first-seen order."""
    by_domain: Dict[str, List[str]] = {}
    for r in records:
        if not r.is_valid:
            continue
        ids = by_domain.setdefault(r.domain.lower(), [])
        sid = r.account_id.strip()
        if sid not in ids:
            ids.append(sid)
    return by_domain


def load_all_sellers(access: SellerAccess, seller_ids_by_domain: Dict[str, List[str]],
                     max_workers: int = 1) -> Dict[str, DomainSellers]:
    domains = list(seller_ids_by_domain)
    if max_workers > 1 and len(domains) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(domains))) as executor:
            loaded = executor.map(lambda d: load_domain_sellers(access, d, seller_ids_by_domain[d]), domains)
            return dict(zip(domains, loaded))
    return {d: load_domain_sellers(access, d, seller_ids_by_domain[d]) for d in domains}


def validate_record(record: AdsTxtRecord, table: Optional[DomainSellers], publisher_domain: str,
                    owner_domains, manager_domains) -> AdsTxtRecord:
    if not record.is_valid:
        return record
    if table is None:
        table = DomainSellers(domain=record.domain.lower(), has_seller_json=False)

    try:
        if table.error is not None:
            result = validate_relationship(record, None, publisher_domain, owner_domains, manager_domains,
                                           None, has_seller_json=False)
            return validation_error_warning(record, table.error, result)

        seller = table.lookup(record.account_id) if table.has_seller_json else None
        result = validate_relationship(
            record,
            seller,
            publisher_domain,
            owner_domains,
            manager_domains,
            table.occurrence_count(record.account_id) if seller else None,
            has_seller_json=table.has_seller_json,
        )
        return apply_warnings(record, result, synthesize_warnings(record, result, publisher_domain))
    except Exception as e:
        logger.error("Error validating against sellers.json for record (domain=%s, account_id=%s)",
                     record.domain, record.account_id, exc_info=True)
        return validation_error_warning(record, str(e) or type(e).__name__)


def cross_check_ads_txt_records(publisher_domain: Optional[str], entries: list, cached_content: Optional[str],
                                sellers, *, max_workers: int = 1) -> list:
    """
    Returns [*variables, *records] with duplicate and sellers.json findings attached.
    Never raises: on unexpected failure the input entries come back unchanged.
    `sellers` is a batch provider, a legacy fetch function, or an explicit SellerAccess.
    """
    if not publisher_domain:
        logger.info("No publisher domain provided, skipping cross-check")
        return entries

    try:
        access = as_seller_access(sellers)
        variables = [e for e in entries if is_ads_txt_variable(e)]
        records = [e for e in entries if is_ads_txt_record(e)]
        logger.info("Cross-checking %d records (%d variables) for %s", len(records), len(variables),
                    publisher_domain)

        records = detect_duplicates(publisher_domain, records, cached_content)

        tables = load_all_sellers(access, group_seller_ids(records), max_workers=max_workers)
        owner_domains, manager_domains = extract_declared_domains(entries)

        validated = [
            validate_record(r, tables.get(r.domain.lower()), publisher_domain, owner_domains, manager_domains)
            for r in records
        ]
        logger.info("After sellers.json validation: %d records, %d with warnings",
                    len(validated), sum(1 for r in validated if r.has_warning))
        return variables + validated
    except Exception:
        logger.exception("Error during ads.txt cross-check")
        return entries
