"""
parser.py
Turns ads.txt text into AdsTxtRecord / AdsTxtVariable entries.

Line format: <ad system domain>, <account id>, <relationship>[, <cert authority id>]
Variables:   CONTACT|SUBDOMAIN|INVENTORYPARTNERDOMAIN|OWNERDOMAIN|MANAGERDOMAIN=<value>

Domains are validated against the public suffix list bundled with tldextract
(the snapshot is used as-is, nothing is downloaded).
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import List, Optional

import tldextract

from .models import (
    DIRECT,
    RELATIONSHIPS,
    AdsTxtRecord,
    AdsTxtVariable,
    ValidationKey,
    invalid_record,
    is_ads_txt_variable,
)

logger = logging.getLogger(__name__)

VARIABLE_RE = re.compile(
    r'^(CONTACT|SUBDOMAIN|INVENTORYPARTNERDOMAIN|OWNERDOMAIN|MANAGERDOMAIN)=(.+)$', re.IGNORECASE
)
# tab, LF and CR are allowed; everything else in the C0/C1 ranges plus the
# unicode separators and format characters is not
INVALID_CHARS_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\u2028-\u202f\u205f-\u206f\ufeff]")
LABEL_RE = re.compile(r'^(?!-)[a-z0-9-]{1,63}(?<!-)$')
EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_extract = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


def registrable_domain(domain: str) -> Optional[str]:
    """Public suffix + 1 label, or None when the name has no registrable part."""
    if not domain:
        return None
    parts = _extract(domain.strip().lower())
    if not parts.domain or not parts.suffix:
        return None
    return f"{parts.domain}.{parts.suffix}"


def is_valid_domain(domain: str) -> bool:
    d = (domain or "").strip().lower().rstrip(".")
    if not d or len(d) > 253:
        return False
    if not all(LABEL_RE.match(label) for label in d.split(".")):
        return False
    return registrable_domain(d) is not None


def is_valid_email(email: str) -> bool:
    if not email or ".." in email or " " in email or "@" not in email:
        return False
    at = email.index("@")
    if at == 0 or at == len(email) - 1 or "." not in email[at:]:
        return False
    return bool(EMAIL_RE.match(email))


def has_invalid_characters(line: str) -> bool:
    return bool(INVALID_CHARS_RE.search(line))


def strip_comment(line: str) -> str:
    s = line.strip()
    if not s or s.startswith("#"):
        return ""
    return s.split("#", 1)[0].strip()


def parse_ads_txt_variable(line: str, line_number: int) -> Optional[AdsTxtVariable]:
    m = VARIABLE_RE.match(line.strip())
    if not m:
        return None
    return AdsTxtVariable(
        variable_type=m.group(1).upper(),
        value=m.group(2).strip(),
        line_number=line_number,
        raw_line=line,
    )


def resolve_relationship(account_type: str, rest: List[str]):
    """
    Returns (relationship, cert_authority_id, error_key).
    The relationship normally sits in field 3; a line may carry it in field 4 instead.
    """
    upper = account_type.upper()
    first_rest = rest[0].upper() if rest else ""
    relationship, caid = DIRECT, None

    if upper in RELATIONSHIPS:
        relationship = upper
    elif first_rest not in RELATIONSHIPS:
        return relationship, None, ValidationKey.INVALID_RELATIONSHIP

    if rest:
        if first_rest in RELATIONSHIPS:
            relationship = first_rest
            if len(rest) > 1:
                caid = rest[1]
        else:
            caid = rest[0]
    return relationship, caid, None


def parse_ads_txt_line(line: str, line_number: int):
    """Parse one line. Returns a record, a variable, or None for blank/comment lines."""
    if has_invalid_characters(line):
        return invalid_record(line_number, line, ValidationKey.INVALID_CHARACTERS)

    cleaned = strip_comment(line)
    if not cleaned:
        return None

    variable = parse_ads_txt_variable(cleaned, line_number)
    if variable:
        return replace(variable, raw_line=line)

    if "," not in cleaned:
        return invalid_record(line_number, line, ValidationKey.INVALID_FORMAT, domain=cleaned)

    parts = [p.strip() for p in cleaned.split(",")]
    if len(parts) < 3:
        return invalid_record(
            line_number, line, ValidationKey.MISSING_FIELDS,
            domain=parts[0], account_id=parts[1] if len(parts) > 1 else "",
        )

    domain, account_id, account_type, rest = parts[0], parts[1], parts[2], parts[3:]
    relationship, caid, error = resolve_relationship(account_type, rest)
    fields = dict(
        domain=domain,
        account_id=account_id,
        account_type=account_type,
        relationship=relationship,
        certification_authority_id=caid,
    )
    if error:
        return invalid_record(line_number, line, error, **fields)
    if not is_valid_domain(domain):
        return invalid_record(line_number, line, ValidationKey.INVALID_DOMAIN, **fields)
    if not account_id:
        return invalid_record(line_number, line, ValidationKey.EMPTY_ACCOUNT_ID, **fields)

    return AdsTxtRecord(line_number=line_number, raw_line=line, **fields)


def default_owner_domain(publisher_domain: str) -> Optional[AdsTxtVariable]:
    root = registrable_domain(publisher_domain)
    if not root:
        logger.warning("Could not derive default OWNERDOMAIN from %r", publisher_domain)
        return None
    return AdsTxtVariable(
        variable_type="OWNERDOMAIN",
        value=root,
        line_number=-1,
        raw_line=f"OWNERDOMAIN={root}",
    )


def parse_ads_txt_content(content: Optional[str], publisher_domain: Optional[str] = None) -> list:
    if not content or not content.strip():
        return [invalid_record(1, "", ValidationKey.EMPTY_FILE)]

    entries = []
    for index, line in enumerate(content.split("\n"), start=1):
        entry = parse_ads_txt_line(line, index)
        if entry is not None:
            entries.append(entry)

    if publisher_domain and not any(
        is_ads_txt_variable(e) and e.variable_type == "OWNERDOMAIN" for e in entries
    ):
        owner = default_owner_domain(publisher_domain)
        if owner:
            entries.append(owner)

    invalid = sum(1 for e in entries if not e.is_valid)
    logger.debug("Parsed %d entries (%d invalid)", len(entries), invalid)
    return entries
