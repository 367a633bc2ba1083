"""
ads_txt_validator
Parse ads.txt, cross-check it against sellers.json, and normalize it.
"""
from .config import CheckerConfig, load_config
from .cross_check import cross_check_ads_txt_records
from .duplicates import detect_duplicates
from .messages import DefaultMessageProvider, ValidationMessage, describe_entry
from .models import (
    AdsTxtRecord,
    AdsTxtVariable,
    Seller,
    Severity,
    ValidationKey,
    ValidationResult,
    ValidationWarning,
    is_ads_txt_record,
    is_ads_txt_variable,
)
from .optimizer import optimize_ads_txt
from .parser import is_valid_email, parse_ads_txt_content, parse_ads_txt_line, parse_ads_txt_variable
from .sellers import (
    BatchAccess,
    BatchSellersResult,
    HttpSellersJsonProvider,
    LegacyAccess,
    SellerResult,
    StaticSellersJsonProvider,
    fetch_sellers_json,
    load_sellers_directory,
)
from .validator import validate_relationship
from .warning_rules import synthesize_warnings

__version__ = "1.0.0"
