"""
warning_rules.py
Turns a ValidationResult into the ordered warning list attached to a record.

Order matters: a missing sellers.json, or an account id absent from it, ends the
evaluation with a single warning. Only matched sellers get the remaining checks.
"""
from __future__ import annotations

from typing import List

from .models import (
    DIRECT,
    INTERMEDIARY_TYPES,
    RESELLER,
    AdsTxtRecord,
    Severity,
    ValidationKey,
    ValidationResult,
    ValidationWarning,
    with_warnings,
)


def _warning(key, severity=Severity.WARNING, **params) -> ValidationWarning:
    return ValidationWarning(key=key, params=params, severity=severity)


def synthesize_warnings(record: AdsTxtRecord, result: ValidationResult, publisher_domain: str) -> List[ValidationWarning]:
    if not result.has_seller_json:
        return [_warning(ValidationKey.NO_SELLERS_JSON, domain=record.domain)]

    is_direct = record.relationship == DIRECT
    if result.account_id_found(record.relationship) is False:
        key = (ValidationKey.DIRECT_ACCOUNT_ID_NOT_IN_SELLERS_JSON if is_direct
               else ValidationKey.RESELLER_ACCOUNT_ID_NOT_IN_SELLERS_JSON)
        return [_warning(key, domain=record.domain, account_id=record.account_id)]

    seller = result.seller_data
    seller_domain = (seller.domain if seller else None) or "unknown"
    seller_type = (seller.seller_type if seller else None) or "unknown"
    warnings = []

    if is_direct and result.direct_domain_matches_seller_json_entry is False:
        warnings.append(_warning(ValidationKey.DOMAIN_MISMATCH, domain=record.domain,
                                 publisher_domain=publisher_domain, seller_domain=seller_domain))

    if (record.relationship == RESELLER
            and result.reseller_domain_matches_seller_json_entry is False
            and (seller is None or seller.normalized_type not in INTERMEDIARY_TYPES)):
        warnings.append(_warning(ValidationKey.DOMAIN_MISMATCH, domain=record.domain,
                                 publisher_domain=publisher_domain, seller_domain=seller_domain))

    if is_direct and result.direct_entry_has_publisher_type is False:
        warnings.append(_warning(ValidationKey.DIRECT_NOT_PUBLISHER, domain=record.domain,
                                 account_id=record.account_id, seller_type=seller_type))

    unique = result.direct_seller_id_is_unique if is_direct else result.reseller_seller_id_is_unique
    if result.account_id_found(record.relationship) and unique is False:
        warnings.append(_warning(ValidationKey.SELLER_ID_NOT_UNIQUE, domain=record.domain,
                                 account_id=record.account_id))

    if (record.relationship == RESELLER
            and result.reseller_account_id_in_sellers_json
            and result.reseller_entry_has_intermediary_type is False):
        warnings.append(_warning(ValidationKey.RESELLER_NOT_INTERMEDIARY, domain=record.domain,
                                 account_id=record.account_id, seller_type=seller_type))

    return warnings


def apply_warnings(record: AdsTxtRecord, result: ValidationResult, warnings) -> AdsTxtRecord:
    """New record carrying the validation result and, when there are any, the warnings."""
    return with_warnings(record, warnings, validation_results=result)


def validation_error_warning(record: AdsTxtRecord, message: str, result=None) -> AdsTxtRecord:
    warning = _warning(ValidationKey.SELLERS_JSON_VALIDATION_ERROR, message=message, domain=record.domain)
    return with_warnings(record, [warning], validation_error=message, validation_results=result)
