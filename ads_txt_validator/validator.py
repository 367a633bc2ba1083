"""
validator.py
Relationship rules: compares one ads.txt record with the seller entry its ad system publishes.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .models import (
    DIRECT,
    INTERMEDIARY_TYPES,
    PUBLISHER_TYPES,
    AdsTxtRecord,
    Seller,
    ValidationResult,
    is_ads_txt_variable,
)

logger = logging.getLogger(__name__)


def extract_declared_domains(entries) -> Tuple[List[str], List[str]]:
    """OWNERDOMAIN and MANAGERDOMAIN values, lower-cased. MANAGERDOMAIN may be "domain,CC"; only the domain counts."""
    owners, managers = [], []
    for e in entries:
        if not is_ads_txt_variable(e):
            continue
        if e.variable_type == "OWNERDOMAIN":
            owners.append(e.value.lower().strip())
        elif e.variable_type == "MANAGERDOMAIN":
            managers.append(e.value.split(",", 1)[0].lower().strip())
    return owners, managers


def domain_matches(seller: Seller, publisher_domain: str, owner_domains: Sequence[str],
                   manager_domains: Sequence[str]) -> Optional[bool]:
    if seller.is_confidential == 1 or not seller.domain:
        return None
    seller_domain = seller.domain.lower().strip()
    if not owner_domains and not manager_domains:
        return publisher_domain.lower().strip() == seller_domain
    return seller_domain in owner_domains or seller_domain in manager_domains


def _unique(seller_id_count: Optional[int]) -> Optional[bool]:
    if seller_id_count is None:
        return None
    return seller_id_count == 1


def validate_relationship(
    record: AdsTxtRecord,
    matched_seller: Optional[Seller],
    publisher_domain: str,
    owner_domains: Sequence[str],
    manager_domains: Sequence[str],
    seller_id_count: Optional[int],
    has_seller_json: bool = True,
) -> ValidationResult:
    if not has_seller_json:
        return ValidationResult(has_seller_json=False)

    found = matched_seller is not None
    if found:
        matches = domain_matches(matched_seller, publisher_domain, owner_domains, manager_domains)
        seller_type = matched_seller.normalized_type
        unique = _unique(seller_id_count)
        logger.debug("Seller %s appears %s time(s), unique: %s", record.account_id, seller_id_count, unique)
    else:
        matches = seller_type = unique = None

    if record.relationship == DIRECT:
        return ValidationResult(
            has_seller_json=True,
            direct_account_id_in_sellers_json=found,
            direct_domain_matches_seller_json_entry=matches,
            direct_entry_has_publisher_type=(seller_type in PUBLISHER_TYPES) if found else None,
            direct_seller_id_is_unique=unique,
            reseller_account_id_in_sellers_json=None,
            reseller_domain_matches_seller_json_entry=None,
            reseller_entry_has_intermediary_type=None,
            reseller_seller_id_is_unique=None,
            seller_data=matched_seller,
        )
    return ValidationResult(
        has_seller_json=True,
        direct_account_id_in_sellers_json=None,
        direct_domain_matches_seller_json_entry=None,
        direct_entry_has_publisher_type=None,
        direct_seller_id_is_unique=None,
        reseller_account_id_in_sellers_json=found,
        reseller_domain_matches_seller_json_entry=matches,
        reseller_entry_has_intermediary_type=(seller_type in INTERMEDIARY_TYPES) if found else None,
        reseller_seller_id_is_unique=unique,
        seller_data=matched_seller,
    )
