"""
models.py
Entry, seller and validation-result types shared by the parser and the cross-check engine.

Entries are frozen dataclasses. Enrichment (duplicate marking, validation results,
warnings) always goes through dataclasses.replace, never through mutation.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

DIRECT = "DIRECT"
RESELLER = "RESELLER"
RELATIONSHIPS = (DIRECT, RESELLER)

VARIABLE_TYPES = ("CONTACT", "SUBDOMAIN", "INVENTORYPARTNERDOMAIN", "OWNERDOMAIN", "MANAGERDOMAIN")

PUBLISHER_TYPES = {"PUBLISHER", "BOTH"}
INTERMEDIARY_TYPES = {"INTERMEDIARY", "BOTH"}


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationKey:
    MISSING_FIELDS = "missingFields"
    INVALID_FORMAT = "invalidFormat"
    INVALID_RELATIONSHIP = "invalidRelationship"
    INVALID_DOMAIN = "invalidDomain"
    EMPTY_ACCOUNT_ID = "emptyAccountId"
    IMPLIMENTED = "implimentedEntry"
    NO_SELLERS_JSON = "noSellersJson"
    DIRECT_ACCOUNT_ID_NOT_IN_SELLERS_JSON = "directAccountIdNotInSellersJson"
    RESELLER_ACCOUNT_ID_NOT_IN_SELLERS_JSON = "resellerAccountIdNotInSellersJson"
    DOMAIN_MISMATCH = "domainMismatch"
    DIRECT_NOT_PUBLISHER = "directNotPublisher"
    SELLER_ID_NOT_UNIQUE = "sellerIdNotUnique"
    RESELLER_NOT_INTERMEDIARY = "resellerNotIntermediary"
    SELLERS_JSON_VALIDATION_ERROR = "sellersJsonValidationError"
    EMPTY_FILE = "emptyFile"
    INVALID_CHARACTERS = "invalidCharacters"


@dataclass(frozen=True)
class ValidationWarning:
    key: str
    params: Dict[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.WARNING

    def to_dict(self):
        return {"key": self.key, "params": dict(self.params), "severity": self.severity.value}


@dataclass(frozen=True)
class Seller:
    seller_id: str
    name: Optional[str] = None
    domain: Optional[str] = None
    seller_type: Optional[str] = None
    is_confidential: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Seller":
        known = {"seller_id", "name", "domain", "seller_type", "is_confidential"}
        conf = data.get("is_confidential")
        # sellers.json files in the wild publish 0/1 as strings too
        if isinstance(conf, str) and conf.strip().isdigit():
            conf = int(conf.strip())
        return cls(
            seller_id="" if data.get("seller_id") is None else str(data["seller_id"]).strip(),
            name=data.get("name"),
            domain=data.get("domain"),
            seller_type=data.get("seller_type"),
            is_confidential=conf,
            extra={k: v for k, v in data.items() if k not in known},
        )

    @property
    def normalized_type(self) -> str:
        return (self.seller_type or "").upper()

    def to_dict(self):
        out = dict(self.extra)
        out["seller_id"] = self.seller_id
        for k in ("name", "domain", "seller_type", "is_confidential"):
            v = getattr(self, k)
            if v is not None:
                out[k] = v
        return out


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of cross-checking one record against its ad system's sellers.json.

    Every field except has_seller_json is tri-state: True, False, or None when the
    check does not apply to the record's relationship or cannot be decided.
    """

    has_seller_json: bool
    direct_account_id_in_sellers_json: Optional[bool] = None
    direct_domain_matches_seller_json_entry: Optional[bool] = None
    direct_entry_has_publisher_type: Optional[bool] = None
    direct_seller_id_is_unique: Optional[bool] = None
    reseller_account_id_in_sellers_json: Optional[bool] = None
    reseller_domain_matches_seller_json_entry: Optional[bool] = None
    reseller_entry_has_intermediary_type: Optional[bool] = None
    reseller_seller_id_is_unique: Optional[bool] = None
    seller_data: Optional[Seller] = None

    def account_id_found(self, relationship: str) -> Optional[bool]:
        if relationship == DIRECT:
            return self.direct_account_id_in_sellers_json
        return self.reseller_account_id_in_sellers_json

    def to_dict(self):
        return {
            "hasSellerJson": self.has_seller_json,
            "directAccountIdInSellersJson": self.direct_account_id_in_sellers_json,
            "directDomainMatchesSellerJsonEntry": self.direct_domain_matches_seller_json_entry,
            "directEntryHasPublisherType": self.direct_entry_has_publisher_type,
            "directSellerIdIsUnique": self.direct_seller_id_is_unique,
            "resellerAccountIdInSellersJson": self.reseller_account_id_in_sellers_json,
            "resellerDomainMatchesSellerJsonEntry": self.reseller_domain_matches_seller_json_entry,
            "resellerEntryHasIntermediaryType": self.reseller_entry_has_intermediary_type,
            "resellerSellerIdIsUnique": self.reseller_seller_id_is_unique,
            "sellerData": self.seller_data.to_dict() if self.seller_data else None,
        }


@dataclass(frozen=True)
class AdsTxtRecord:
    domain: str
    account_id: str
    account_type: str
    relationship: str
    line_number: int
    raw_line: str
    is_valid: bool = True
    certification_authority_id: Optional[str] = None
    error: Optional[str] = None
    has_warning: bool = False
    warning: Optional[str] = None
    validation_key: Optional[str] = None
    severity: Optional[Severity] = None
    warning_params: Dict[str, Any] = field(default_factory=dict)
    all_warnings: Tuple[ValidationWarning, ...] = ()
    validation_error: Optional[str] = None
    duplicate_domain: Optional[str] = None
    validation_results: Optional[ValidationResult] = None

    is_variable = False

    def lookup_key(self) -> str:
        return f"{self.domain.lower().strip()}|{self.account_id}|{self.relationship}"

    def to_dict(self):
        out = {
            "domain": self.domain,
            "account_id": self.account_id,
            "account_type": self.account_type,
            "relationship": self.relationship,
            "certification_authority_id": self.certification_authority_id,
            "line_number": self.line_number,
            "raw_line": self.raw_line,
            "is_valid": self.is_valid,
            "is_variable": False,
            "has_warning": self.has_warning,
        }
        for k in ("error", "warning", "validation_key", "validation_error", "duplicate_domain"):
            v = getattr(self, k)
            if v is not None:
                out[k] = v
        if self.severity is not None:
            out["severity"] = self.severity.value
        if self.warning_params:
            out["warning_params"] = dict(self.warning_params)
        if self.all_warnings:
            out["all_warnings"] = [w.to_dict() for w in self.all_warnings]
        if self.validation_results is not None:
            out["validation_results"] = self.validation_results.to_dict()
        return out


@dataclass(frozen=True)
class AdsTxtVariable:
    variable_type: str
    value: str
    line_number: int
    raw_line: str
    is_valid: bool = True

    is_variable = True

    def to_dict(self):
        return {
            "variable_type": self.variable_type,
            "value": self.value,
            "line_number": self.line_number,
            "raw_line": self.raw_line,
            "is_valid": self.is_valid,
            "is_variable": True,
        }


AdsTxtEntry = Union[AdsTxtRecord, AdsTxtVariable]


def is_ads_txt_record(entry) -> bool:
    return isinstance(entry, AdsTxtRecord)


def is_ads_txt_variable(entry) -> bool:
    return isinstance(entry, AdsTxtVariable)


def invalid_record(line_number, raw_line, key, **fields) -> AdsTxtRecord:
    """Build an invalid record carrying whatever fields could be parsed."""
    base = dict(domain="", account_id="", account_type="", relationship=DIRECT)
    base.update({k: v for k, v in fields.items() if v is not None})
    return AdsTxtRecord(
        line_number=line_number,
        raw_line=raw_line,
        is_valid=False,
        error=key,
        validation_key=key,
        severity=Severity.ERROR,
        **base,
    )


def with_warnings(record: AdsTxtRecord, warnings, **extra) -> AdsTxtRecord:
    """Return a copy of record carrying warnings; the first one fills the legacy single-warning fields."""
    warnings = tuple(warnings)
    if not warnings:
        return replace(record, **extra) if extra else record
    primary = warnings[0]
    return replace(
        record,
        is_valid=True,
        has_warning=True,
        warning=primary.key,
        validation_key=primary.key,
        severity=primary.severity,
        warning_params=dict(primary.params),
        all_warnings=warnings,
        **extra,
    )
