import pytest

from ads_txt_validator.messages import (
    MESSAGES,
    DefaultMessageProvider,
    describe_entry,
    fill_placeholders,
    severity_for_key,
    supported_locales,
)
from ads_txt_validator.models import Severity, ValidationKey, ValidationResult
from ads_txt_validator.parser import parse_ads_txt_line
from ads_txt_validator.warning_rules import apply_warnings, synthesize_warnings


def test_locales_cover_the_same_keys():
    assert supported_locales() == ["en", "ja"]
    assert set(MESSAGES["en"]) == set(MESSAGES["ja"])


def test_fill_placeholders_leaves_unknown_names():
    assert fill_placeholders("{{a}} and {{b}}", {"a": 1}) == "1 and {{b}}"


def test_format_message_en():
    provider = DefaultMessageProvider()
    msg = provider.format_message(ValidationKey.NO_SELLERS_JSON, {"domain": "openx.com"})
    assert msg.message == "No sellers.json was found for openx.com."
    assert msg.severity == Severity.WARNING
    assert msg.help_url == "/help/validation#noSellersJson"


def test_format_message_ja_with_base_url():
    provider = DefaultMessageProvider("ja", base_url="https://tools.example.com/")
    msg = provider.format_message(ValidationKey.EMPTY_FILE, {})
    assert msg.message == "ads.txtファイルが空です。"
    assert msg.severity == Severity.ERROR
    assert msg.help_url == "https://tools.example.com/help/validation#emptyFile"


def test_locale_override_per_call():
    provider = DefaultMessageProvider("en")
    assert provider.get_message(ValidationKey.EMPTY_FILE, "ja").message == "ads.txtファイルが空です。"


def test_unknown_key():
    assert DefaultMessageProvider().format_message("nope", {}) is None


def test_unsupported_locale():
    with pytest.raises(ValueError):
        DefaultMessageProvider("fr")


def test_severity_for_key():
    assert severity_for_key(ValidationKey.INVALID_DOMAIN) == Severity.ERROR
    assert severity_for_key(ValidationKey.DOMAIN_MISMATCH) == Severity.WARNING
    assert severity_for_key(ValidationKey.IMPLIMENTED) == Severity.INFO


def test_describe_entry_for_warnings_and_errors():
    provider = DefaultMessageProvider()
    record = parse_ads_txt_line("google.com, pub-1, DIRECT", 1)
    result = ValidationResult(has_seller_json=True, direct_account_id_in_sellers_json=False)
    warned = apply_warnings(record, result, synthesize_warnings(record, result, "example.com"))

    msgs = describe_entry(warned, provider)
    assert [m.key for m in msgs] == [ValidationKey.DIRECT_ACCOUNT_ID_NOT_IN_SELLERS_JSON]
    assert "pub-1" in msgs[0].message

    invalid = parse_ads_txt_line("google.com, pub-1, DIREC", 2)
    assert describe_entry(invalid, provider)[0].key == ValidationKey.INVALID_RELATIONSHIP
    assert describe_entry(record, provider) == []
