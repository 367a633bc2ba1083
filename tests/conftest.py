import pytest

from ads_txt_validator.sellers import StaticSellersJsonProvider


class RecordingProvider(StaticSellersJsonProvider):
    """Static provider that remembers every call made to it."""

    def __init__(self, documents, fail_domains=()):
        super().__init__(documents)
        self.fail_domains = set(fail_domains)
        self.has_calls = []
        self.batch_calls = []

    def has_seller_json(self, domain):
        self.has_calls.append(domain)
        if domain in self.fail_domains:
            raise RuntimeError(f"boom: {domain}")
        return super().has_seller_json(domain)

    def batch_get_sellers(self, domain, seller_ids):
        self.batch_calls.append((domain, list(seller_ids)))
        return super().batch_get_sellers(domain, seller_ids)


def sellers_doc(*sellers):
    return {"version": "1.0", "contact_email": "ops@adsystem.test", "sellers": list(sellers)}


@pytest.fixture
def documents():
    return {
        "google.com": sellers_doc(
            {"seller_id": "pub-1", "name": "Example", "domain": "example.com", "seller_type": "PUBLISHER"},
            {"seller_id": "pub-2", "name": "Other", "domain": "other.com", "seller_type": "PUBLISHER"},
            {"seller_id": "pub-3", "name": "Secret", "domain": "hidden.com", "seller_type": "PUBLISHER",
             "is_confidential": 1},
            {"seller_id": "pub-4", "name": "Network", "domain": "network.com", "seller_type": "INTERMEDIARY"},
            {"seller_id": "pub-5", "name": "Dup A", "domain": "example.com", "seller_type": "BOTH"},
            {"seller_id": "pub-5", "name": "Dup B", "domain": "example.com", "seller_type": "BOTH"},
        ),
        "openx.com": sellers_doc(
            {"seller_id": "541058490", "name": "Fluct", "domain": "corp.fluct.jp", "seller_type": "INTERMEDIARY"},
        ),
    }


@pytest.fixture
def provider(documents):
    return RecordingProvider(documents)


@pytest.fixture
def legacy_fetch(documents):
    calls = []

    def fetch(domain):
        calls.append(domain)
        return documents.get(domain)

    fetch.calls = calls
    return fetch
