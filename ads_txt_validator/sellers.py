"""
sellers.py
Seller data access for the cross-check.

Two shapes of collaborator are supported:
- a batch provider (has_seller_json / batch_get_sellers / get_metadata / get_cache_info)
- a legacy fetch function: domain -> whole sellers.json object (or None)

as_seller_access() picks one of them once; load_domain_sellers() turns either shape
into the same read-only DomainSellers table used during validation.
"""
from __future__ import annotations

import json
import logging
import os
import threading
import time
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Union

from .models import Seller

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ads-txt-validator/1.0"


@dataclass(frozen=True)
class CacheInfo:
    is_cached: bool
    status: str = "success"  # success / error / stale
    last_updated: Optional[str] = None
    expires_at: Optional[str] = None


@dataclass(frozen=True)
class SellerResult:
    seller_id: str
    seller: Optional[Seller]
    found: bool
    source: str = "fresh"  # cache / fresh
    error: Optional[str] = None


@dataclass(frozen=True)
class BatchSellersResult:
    domain: str
    requested_count: int
    found_count: int
    results: List[SellerResult]
    metadata: Dict[str, Any] = field(default_factory=dict)
    cache: CacheInfo = field(default_factory=lambda: CacheInfo(is_cached=False))


class SellersJsonProvider(Protocol):
    def has_seller_json(self, domain: str) -> bool: ...

    def batch_get_sellers(self, domain: str, seller_ids: List[str]) -> BatchSellersResult: ...

    def get_metadata(self, domain: str) -> Dict[str, Any]: ...

    def get_cache_info(self, domain: str) -> CacheInfo: ...


FetchSellersJson = Callable[[str], Optional[Dict[str, Any]]]


@dataclass(frozen=True)
class BatchAccess:
    provider: SellersJsonProvider


@dataclass(frozen=True)
class LegacyAccess:
    fetch: FetchSellersJson


SellerAccess = Union[BatchAccess, LegacyAccess]


def as_seller_access(obj) -> SellerAccess:
    if isinstance(obj, (BatchAccess, LegacyAccess)):
        return obj
    if callable(getattr(obj, "batch_get_sellers", None)):
        return BatchAccess(obj)
    if callable(obj):
        return LegacyAccess(obj)
    raise TypeError(f"expected a sellers.json provider or fetch function, got {type(obj).__name__}")


@dataclass(frozen=True)
class DomainSellers:
    """Seller lookup table for one advertising-system domain. Built once, then only read."""

    domain: str
    has_seller_json: bool
    sellers: Mapping[str, Seller] = field(default_factory=dict)
    id_counts: Mapping[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def failed(cls, domain: str, message: str) -> "DomainSellers":
        return cls(domain=domain, has_seller_json=False, error=message)

    def lookup(self, account_id: str) -> Optional[Seller]:
        return self.sellers.get(str(account_id).strip())

    def occurrence_count(self, account_id: str) -> Optional[int]:
        return self.id_counts.get(str(account_id).strip())


def sellers_from_document(document) -> Optional[List[Dict[str, Any]]]:
    if not isinstance(document, dict):
        return None
    sellers = document.get("sellers")
    if not isinstance(sellers, list):
        return None
    return [s for s in sellers if isinstance(s, dict)]


def index_sellers(raw_sellers: Iterable[Dict[str, Any]]):
    """Linear pass over a sellers array: first seller per id, plus occurrence counts of every id."""
    by_id: Dict[str, Seller] = {}
    counts: Dict[str, int] = {}
    for s in raw_sellers:
        sid = s.get("seller_id")
        if sid is None:
            continue
        sid = str(sid).strip()
        if not sid:
            continue
        counts[sid] = counts.get(sid, 0) + 1
        if sid not in by_id:
            by_id[sid] = Seller.from_dict(s)
    return by_id, counts


def _load_batch(provider: SellersJsonProvider, domain: str, seller_ids: List[str]) -> DomainSellers:
    if not provider.has_seller_json(domain):
        logger.info("No sellers.json found for domain: %s", domain)
        return DomainSellers(domain=domain, has_seller_json=False)

    batch = provider.batch_get_sellers(domain, seller_ids)
    sellers = {}
    for result in batch.results:
        if result.found and result.seller is not None:
            sellers[str(result.seller_id).strip()] = result.seller
    logger.info("Found %d/%d sellers for domain: %s", batch.found_count, batch.requested_count, domain)
    # batch results cannot reveal repeated ids elsewhere in the file; every resolved id counts once
    return DomainSellers(
        domain=domain,
        has_seller_json=True,
        sellers=sellers,
        id_counts={sid: 1 for sid in sellers},
    )


def _load_legacy(fetch: FetchSellersJson, domain: str) -> DomainSellers:
    logger.info("Fetching sellers.json for domain: %s", domain)
    raw = sellers_from_document(fetch(domain))
    if raw is None:
        return DomainSellers(domain=domain, has_seller_json=False)
    by_id, counts = index_sellers(raw)
    return DomainSellers(domain=domain, has_seller_json=True, sellers=by_id, id_counts=counts)


def load_domain_sellers(access: SellerAccess, domain: str, seller_ids: List[str]) -> DomainSellers:
    """Fetch seller data for one domain. Collaborator failures stay confined to that domain."""
    try:
        if isinstance(access, BatchAccess):
            return _load_batch(access.provider, domain, seller_ids)
        return _load_legacy(access.fetch, domain)
    except Exception as e:
        logger.error("Error fetching sellers for domain %s: %s", domain, e, exc_info=True)
        return DomainSellers.failed(domain, str(e) or type(e).__name__)


class _DocumentSellersProvider(ABC):
    """Batch provider over whole sellers.json documents; subclasses decide where documents come from."""

    @abstractmethod
    def _document(self, domain: str) -> Optional[Dict[str, Any]]:
        ...

    def _source(self, domain: str) -> str:
        return "fresh"

    def has_seller_json(self, domain: str) -> bool:
        return sellers_from_document(self._document(domain)) is not None

    def get_metadata(self, domain: str) -> Dict[str, Any]:
        doc = self._document(domain)
        raw = sellers_from_document(doc)
        if raw is None:
            return {}
        meta = {k: doc[k] for k in ("version", "contact_email", "contact_address", "identifiers") if k in doc}
        meta["seller_count"] = len(raw)
        return meta

    def get_cache_info(self, domain: str) -> CacheInfo:
        return CacheInfo(is_cached=False)

    def batch_get_sellers(self, domain: str, seller_ids: List[str]) -> BatchSellersResult:
        source = self._source(domain)
        by_id, _ = index_sellers(sellers_from_document(self._document(domain)) or [])
        results = []
        for sid in seller_ids:
            seller = by_id.get(str(sid).strip())
            results.append(SellerResult(seller_id=sid, seller=seller, found=seller is not None, source=source))
        return BatchSellersResult(
            domain=domain,
            requested_count=len(seller_ids),
            found_count=sum(1 for r in results if r.found),
            results=results,
            metadata=self.get_metadata(domain),
            cache=self.get_cache_info(domain),
        )


class StaticSellersJsonProvider(_DocumentSellersProvider):
    """Serves sellers.json documents already held in memory, keyed by domain."""

    def __init__(self, documents: Mapping[str, Dict[str, Any]]):
        self._documents = {k.lower(): v for k, v in documents.items()}

    def _document(self, domain):
        return self._documents.get(domain.lower())

    def _source(self, domain):
        return "cache"

    def get_cache_info(self, domain):
        return CacheInfo(is_cached=domain.lower() in self._documents)


def load_json(path):
    with open(path, "r", encoding="utf-8-sig") as f:
        return json.load(f)


def load_sellers_directory(dirpath: str) -> StaticSellersJsonProvider:
    """Reads <domain>.json files (e.g. openx.com.json) into a static provider."""
    documents = {}
    for name in sorted(os.listdir(dirpath)):
        if not name.endswith(".json"):
            continue
        path = os.path.join(dirpath, name)
        try:
            documents[name[: -len(".json")]] = load_json(path)
        except (OSError, ValueError) as e:
            logger.warning("Skipping unreadable sellers.json %s: %s", path, e)
    logger.info("Loaded %d sellers.json documents from %s", len(documents), dirpath)
    return StaticSellersJsonProvider(documents)


def fetch_sellers_json(domain: str, timeout: float = 20, user_agent: str = DEFAULT_USER_AGENT):
    """
    Legacy fetch function: GET https://<domain>/sellers.json, then plain HTTP.
    Returns the decoded object, or None when neither URL yields JSON.
    """
    last_err = None
    for url in (f"https://{domain}/sellers.json", f"http://{domain}/sellers.json"):
        try:
            req = urllib.request.Request(url, headers={"User-Agent": user_agent})
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                return json.loads(resp.read().decode("utf-8-sig", errors="replace"))
        except (OSError, ValueError) as e:
            last_err = str(e)
    logger.info("sellers.json unavailable for %s: %s", domain, last_err)
    return None


class HttpSellersJsonProvider(_DocumentSellersProvider):
    """Batch provider that fetches sellers.json over HTTP and keeps each document for ttl_seconds.

    A failed fetch (None) is only kept for error_ttl_seconds, so an outage clears quickly.
    """

    def __init__(self, timeout: float = 20, user_agent: str = DEFAULT_USER_AGENT, ttl_seconds: float = 3600,
                 fetch: Optional[FetchSellersJson] = None, error_ttl_seconds: float = 60):
        self._timeout = timeout
        self._user_agent = user_agent
        self._ttl = ttl_seconds
        self._error_ttl = min(error_ttl_seconds, ttl_seconds)
        self._fetch = fetch or (lambda d: fetch_sellers_json(d, timeout=self._timeout, user_agent=self._user_agent))
        self._cache: Dict[str, tuple] = {}
        self._lock = threading.Lock()

    def _ttl_for(self, doc):
        return self._error_ttl if doc is None else self._ttl

    def _fresh(self, domain):
        entry = self._cache.get(domain)
        return entry is not None and time.time() - entry[1] < self._ttl_for(entry[0])

    def _document(self, domain):
        domain = domain.lower()
        with self._lock:
            if self._fresh(domain):
                return self._cache[domain][0]
        doc = self._fetch(domain)
        with self._lock:
            self._cache[domain] = (doc, time.time())
        return doc

    def _source(self, domain):
        with self._lock:
            return "cache" if self._fresh(domain.lower()) else "fresh"

    def get_cache_info(self, domain):
        domain = domain.lower()
        with self._lock:
            entry = self._cache.get(domain)
        if entry is None:
            return CacheInfo(is_cached=False)
        doc, fetched_at = entry
        expires = fetched_at + self._ttl_for(doc)
        return CacheInfo(
            is_cached=True,
            status="error" if doc is None else ("success" if time.time() < expires else "stale"),
            last_updated=_iso(fetched_at),
            expires_at=_iso(expires),
        )


def _iso(ts):
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(ts))
