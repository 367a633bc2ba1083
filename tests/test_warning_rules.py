from ads_txt_validator.models import Seller, Severity, ValidationKey, ValidationResult
from ads_txt_validator.parser import parse_ads_txt_line
from ads_txt_validator.warning_rules import apply_warnings, synthesize_warnings, validation_error_warning

DIRECT_REC = parse_ads_txt_line("google.com, pub-1, DIRECT", 1)
RESELLER_REC = parse_ads_txt_line("openx.com, 541058490, RESELLER", 2)


def keys(warnings):
    return [w.key for w in warnings]


def test_no_sellers_json_is_the_only_warning():
    # every other flag set to something that would otherwise warn
    result = ValidationResult(
        has_seller_json=False,
        direct_account_id_in_sellers_json=True,
        direct_domain_matches_seller_json_entry=False,
        direct_entry_has_publisher_type=False,
        direct_seller_id_is_unique=False,
    )
    warnings = synthesize_warnings(DIRECT_REC, result, "example.com")
    assert keys(warnings) == [ValidationKey.NO_SELLERS_JSON]
    assert warnings[0].params == {"domain": "google.com"}


def test_account_id_missing_stops_evaluation():
    result = ValidationResult(has_seller_json=True, direct_account_id_in_sellers_json=False)
    warnings = synthesize_warnings(DIRECT_REC, result, "example.com")
    assert keys(warnings) == [ValidationKey.DIRECT_ACCOUNT_ID_NOT_IN_SELLERS_JSON]
    assert warnings[0].params == {"domain": "google.com", "account_id": "pub-1"}

    result = ValidationResult(has_seller_json=True, reseller_account_id_in_sellers_json=False)
    assert keys(synthesize_warnings(RESELLER_REC, result, "example.com")) == [
        ValidationKey.RESELLER_ACCOUNT_ID_NOT_IN_SELLERS_JSON
    ]


def test_direct_warnings_in_order():
    s = Seller.from_dict({"seller_id": "pub-1", "domain": "other.com", "seller_type": "INTERMEDIARY"})
    result = ValidationResult(
        has_seller_json=True,
        direct_account_id_in_sellers_json=True,
        direct_domain_matches_seller_json_entry=False,
        direct_entry_has_publisher_type=False,
        direct_seller_id_is_unique=False,
        seller_data=s,
    )
    warnings = synthesize_warnings(DIRECT_REC, result, "example.com")
    assert keys(warnings) == [
        ValidationKey.DOMAIN_MISMATCH,
        ValidationKey.DIRECT_NOT_PUBLISHER,
        ValidationKey.SELLER_ID_NOT_UNIQUE,
    ]
    assert warnings[0].params == {"domain": "google.com", "publisher_domain": "example.com",
                                  "seller_domain": "other.com"}
    assert warnings[1].params["seller_type"] == "INTERMEDIARY"
    assert all(w.severity == Severity.WARNING for w in warnings)


def test_reseller_domain_mismatch_exempt_for_intermediaries():
    s = Seller.from_dict({"seller_id": "541058490", "domain": "corp.fluct.jp", "seller_type": "INTERMEDIARY"})
    result = ValidationResult(
        has_seller_json=True,
        reseller_account_id_in_sellers_json=True,
        reseller_domain_matches_seller_json_entry=False,
        reseller_entry_has_intermediary_type=True,
        reseller_seller_id_is_unique=True,
        seller_data=s,
    )
    assert synthesize_warnings(RESELLER_REC, result, "example.com") == []


def test_reseller_publisher_seller():
    s = Seller.from_dict({"seller_id": "541058490", "domain": "other.com", "seller_type": "PUBLISHER"})
    result = ValidationResult(
        has_seller_json=True,
        reseller_account_id_in_sellers_json=True,
        reseller_domain_matches_seller_json_entry=False,
        reseller_entry_has_intermediary_type=False,
        reseller_seller_id_is_unique=True,
        seller_data=s,
    )
    assert keys(synthesize_warnings(RESELLER_REC, result, "example.com")) == [
        ValidationKey.DOMAIN_MISMATCH,
        ValidationKey.RESELLER_NOT_INTERMEDIARY,
    ]


def test_missing_seller_details_default_to_unknown():
    s = Seller.from_dict({"seller_id": "pub-1"})
    result = ValidationResult(
        has_seller_json=True,
        direct_account_id_in_sellers_json=True,
        direct_domain_matches_seller_json_entry=False,
        direct_entry_has_publisher_type=False,
        direct_seller_id_is_unique=True,
        seller_data=s,
    )
    warnings = synthesize_warnings(DIRECT_REC, result, "example.com")
    assert warnings[0].params["seller_domain"] == "unknown"
    assert warnings[1].params["seller_type"] == "unknown"


def test_clean_record_has_no_warnings():
    s = Seller.from_dict({"seller_id": "pub-1", "domain": "example.com", "seller_type": "PUBLISHER"})
    result = ValidationResult(
        has_seller_json=True,
        direct_account_id_in_sellers_json=True,
        direct_domain_matches_seller_json_entry=True,
        direct_entry_has_publisher_type=True,
        direct_seller_id_is_unique=True,
        seller_data=s,
    )
    assert synthesize_warnings(DIRECT_REC, result, "example.com") == []
    out = apply_warnings(DIRECT_REC, result, [])
    assert out.has_warning is False
    assert out.validation_results is result


def test_apply_warnings_fills_primary_fields():
    result = ValidationResult(has_seller_json=False)
    out = apply_warnings(DIRECT_REC, result, synthesize_warnings(DIRECT_REC, result, "example.com"))
    assert out.has_warning
    assert out.validation_key == ValidationKey.NO_SELLERS_JSON
    assert out.warning == ValidationKey.NO_SELLERS_JSON
    assert out.warning_params == {"domain": "google.com"}
    assert len(out.all_warnings) == 1
    assert out.validation_results is result
    assert DIRECT_REC.validation_results is None


def test_validation_error_warning():
    out = validation_error_warning(DIRECT_REC, "timed out")
    assert out.is_valid
    assert out.validation_key == ValidationKey.SELLERS_JSON_VALIDATION_ERROR
    assert out.validation_error == "timed out"
    assert out.warning_params == {"message": "timed out", "domain": "google.com"}
