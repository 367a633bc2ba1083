import pytest

from ads_txt_validator.models import AdsTxtRecord, AdsTxtVariable, Severity, ValidationKey
from ads_txt_validator.parser import (
    has_invalid_characters,
    is_valid_domain,
    is_valid_email,
    parse_ads_txt_content,
    parse_ads_txt_line,
    registrable_domain,
)


def test_valid_record_with_authority_id():
    r = parse_ads_txt_line("example.com, pub-123456789, DIRECT, f08c47fec0942fa0", 1)
    assert isinstance(r, AdsTxtRecord)
    assert r.is_valid
    assert (r.domain, r.account_id, r.relationship) == ("example.com", "pub-123456789", "DIRECT")
    assert r.certification_authority_id == "f08c47fec0942fa0"
    assert r.is_variable is False


def test_relationship_is_normalized_to_upper_case():
    r = parse_ads_txt_line("google.com, pub-1, reseller", 3)
    assert r.is_valid
    assert r.relationship == "RESELLER"
    assert r.account_type == "reseller"


@pytest.mark.parametrize("line", ["", "   ", "# full line comment", "  # indented comment"])
def test_blank_and_comment_lines_are_ignored(line):
    assert parse_ads_txt_line(line, 1) is None


def test_inline_comment_is_stripped():
    r = parse_ads_txt_line("improvedigital.com, 1863, RESELLER # Premium video demand", 4)
    assert r.is_valid
    assert r.relationship == "RESELLER"
    assert r.certification_authority_id is None
    assert r.raw_line == "improvedigital.com, 1863, RESELLER # Premium video demand"


def test_inline_comment_after_authority_id():
    r = parse_ads_txt_line("google.com, pub-123, DIRECT, f08c47fec0942fa0 # Google AdSense", 1)
    assert r.is_valid
    assert r.certification_authority_id == "f08c47fec0942fa0"


def test_empty_inline_comment():
    r = parse_ads_txt_line("domain.com, 789, DIRECT # ", 1)
    assert r.is_valid


def test_misspelled_relationship_is_invalid():
    r = parse_ads_txt_line("ad-generation.jp, 2145, RESELLE, 7f4ea9029ac04e53", 1)
    assert not r.is_valid
    assert r.validation_key == ValidationKey.INVALID_RELATIONSHIP
    assert r.error == "invalidRelationship"
    assert r.severity == Severity.ERROR
    assert r.domain == "ad-generation.jp"


def test_relationship_in_fourth_field():
    r = parse_ads_txt_line("example.com, 2145, SOMETHING, RESELLER, abc123", 1)
    assert r.is_valid
    assert r.relationship == "RESELLER"
    assert r.certification_authority_id == "abc123"


def test_missing_fields():
    r = parse_ads_txt_line("example.com, 12345", 2)
    assert not r.is_valid
    assert r.validation_key == ValidationKey.MISSING_FIELDS
    assert r.account_id == "12345"


def test_no_delimiter_is_invalid_format():
    r = parse_ads_txt_line("example.com", 2)
    assert not r.is_valid
    assert r.validation_key == ValidationKey.INVALID_FORMAT


def test_invalid_domain():
    r = parse_ads_txt_line("example com, 2145, DIRECT, 7f4ea9029ac04e53", 1)
    assert not r.is_valid
    assert r.validation_key == ValidationKey.INVALID_DOMAIN


def test_empty_account_id():
    r = parse_ads_txt_line("example.com, , DIRECT", 1)
    assert not r.is_valid
    assert r.validation_key == ValidationKey.EMPTY_ACCOUNT_ID


def test_control_characters_are_rejected():
    r = parse_ads_txt_line("example.com, 1\x07, DIRECT", 9)
    assert not r.is_valid
    assert r.validation_key == ValidationKey.INVALID_CHARACTERS
    assert r.line_number == 9


def test_tab_and_carriage_return_are_allowed():
    assert not has_invalid_characters("example.com,\t1, DIRECT\r")
    assert has_invalid_characters("example.com, 1, DIRECT\ufeff")
    assert has_invalid_characters("a\u2028b")


def test_variable_lines():
    v = parse_ads_txt_line("ownerdomain=Example.com", 5)
    assert isinstance(v, AdsTxtVariable)
    assert v.variable_type == "OWNERDOMAIN"
    assert v.value == "Example.com"
    assert v.is_variable is True
    assert v.is_valid


def test_manager_domain_keeps_country_suffix():
    v = parse_ads_txt_line("MANAGERDOMAIN=manager.com,US", 1)
    assert v.variable_type == "MANAGERDOMAIN"
    assert v.value == "manager.com,US"


def test_unknown_variable_is_not_a_variable():
    r = parse_ads_txt_line("FOO=bar", 1)
    assert isinstance(r, AdsTxtRecord)
    assert not r.is_valid


def test_empty_file():
    entries = parse_ads_txt_content("")
    assert len(entries) == 1
    assert entries[0].validation_key == ValidationKey.EMPTY_FILE
    assert entries[0].line_number == 1
    assert not entries[0].is_valid


def test_whitespace_only_file_is_empty():
    assert parse_ads_txt_content("  \n\n \t")[0].validation_key == ValidationKey.EMPTY_FILE


def test_content_keeps_line_numbers():
    content = "# header\ngoogle.com, pub-1, DIRECT\n\nCONTACT=ads@example.com\nopenx.com, 1, RESELLER"
    entries = parse_ads_txt_content(content)
    assert [e.line_number for e in entries] == [2, 4, 5]


def test_default_owner_domain_added():
    entries = parse_ads_txt_content("google.com, pub-1, DIRECT", "www.example.co.uk")
    owner = [e for e in entries if isinstance(e, AdsTxtVariable)]
    assert len(owner) == 1
    assert owner[0].value == "example.co.uk"
    assert owner[0].line_number == -1


def test_default_owner_domain_not_added_when_declared():
    entries = parse_ads_txt_content("OWNERDOMAIN=foo.com\ngoogle.com, pub-1, DIRECT", "example.com")
    owners = [e.value for e in entries if isinstance(e, AdsTxtVariable)]
    assert owners == ["foo.com"]


@pytest.mark.parametrize("domain,expected", [
    ("example.com", True),
    ("sub.example.com", True),
    ("ad-generation.jp", True),
    ("example com", False),
    ("-bad.com", False),
    ("localhost", False),
    ("com", False),
    ("", False),
])
def test_is_valid_domain(domain, expected):
    assert is_valid_domain(domain) is expected


def test_registrable_domain():
    assert registrable_domain("a.b.example.com") == "example.com"
    assert registrable_domain("com") is None


@pytest.mark.parametrize("email,expected", [
    ("ads@example.com", True),
    ("first.last+tag@sub.example.org", True),
    ("no-at-sign.example.com", False),
    ("@example.com", False),
    ("user@", False),
    ("a..b@example.com", False),
    ("user@localhost", False),
    ("user name@example.com", False),
])
def test_is_valid_email(email, expected):
    assert is_valid_email(email) is expected
