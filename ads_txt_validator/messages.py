"""
messages.py
Human-readable text for validation keys, in English and Japanese.

Templates use {{name}} placeholders filled from a warning's params. Help links are
relative unless a base_url is configured on the provider. There is no shared global
provider: whoever renders messages owns a DefaultMessageProvider instance.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .models import Severity, ValidationKey as K

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")

MESSAGES = {
    "en": {
        K.MISSING_FIELDS: ("The line is missing required fields.",
                           "Each record needs at least a domain, an account ID and a relationship."),
        K.INVALID_FORMAT: ("The line is not in ads.txt record format.",
                           "Fields must be separated by commas."),
        K.INVALID_RELATIONSHIP: ("The relationship must be DIRECT or RESELLER.",
                                 "The third field declares the account relationship."),
        K.INVALID_DOMAIN: ("The advertising system domain is not a valid domain.",
                           "Use the registrable domain of the ad system, e.g. google.com."),
        K.EMPTY_ACCOUNT_ID: ("The account ID is empty.", "The second field must hold the publisher's account ID."),
        K.IMPLIMENTED: ("This entry is already present in the ads.txt of {{domain}}.",
                        "The same domain, account ID and relationship are already published."),
        K.NO_SELLERS_JSON: ("No sellers.json was found for {{domain}}.",
                            "The advertising system does not publish a sellers.json file."),
        K.DIRECT_ACCOUNT_ID_NOT_IN_SELLERS_JSON: (
            "Account ID {{account_id}} is not listed in the sellers.json of {{domain}} (DIRECT).",
            "DIRECT entries should match a seller_id in the ad system's sellers.json."),
        K.RESELLER_ACCOUNT_ID_NOT_IN_SELLERS_JSON: (
            "Account ID {{account_id}} is not listed in the sellers.json of {{domain}} (RESELLER).",
            "RESELLER entries should match a seller_id in the ad system's sellers.json."),
        K.DOMAIN_MISMATCH: ("The sellers.json domain {{seller_domain}} does not match {{publisher_domain}}.",
                            "The seller's domain should equal the OWNERDOMAIN or MANAGERDOMAIN declared in ads.txt."),
        K.DIRECT_NOT_PUBLISHER: ("DIRECT entry {{account_id}} on {{domain}} has seller_type {{seller_type}}.",
                                 "DIRECT entries should point to a PUBLISHER or BOTH seller."),
        K.SELLER_ID_NOT_UNIQUE: ("Seller ID {{account_id}} appears more than once in the sellers.json of {{domain}}.",
                                 "seller_id values must be unique within a sellers.json file."),
        K.RESELLER_NOT_INTERMEDIARY: ("RESELLER entry {{account_id}} on {{domain}} has seller_type {{seller_type}}.",
                                      "RESELLER entries should point to an INTERMEDIARY or BOTH seller."),
        K.SELLERS_JSON_VALIDATION_ERROR: ("sellers.json for {{domain}} could not be checked: {{message}}",
                                          "The check will be retried on the next run."),
        K.EMPTY_FILE: ("The ads.txt file is empty.", "Add at least one record."),
        K.INVALID_CHARACTERS: ("The line contains control or non-printable characters.",
                               "Remove invisible characters and save the file as plain UTF-8 text."),
    },
    "ja": {
        K.MISSING_FIELDS: ("必須フィールドが不足しています。", "ドメイン、アカウントID、関係の3項目が必要です。"),
        K.INVALID_FORMAT: ("ads.txtのレコード形式ではありません。", "各フィールドはカンマで区切ってください。"),
        K.INVALID_RELATIONSHIP: ("関係はDIRECTまたはRESELLERである必要があります。", "3番目のフィールドで関係を指定します。"),
        K.INVALID_DOMAIN: ("広告システムのドメインが無効です。", "google.comのような登録可能ドメインを指定してください。"),
        K.EMPTY_ACCOUNT_ID: ("アカウントIDが空です。", "2番目のフィールドにアカウントIDを指定してください。"),
        K.IMPLIMENTED: ("このエントリは{{domain}}のads.txtに既に記載されています。",
                        "同じドメイン、アカウントID、関係のレコードが公開済みです。"),
        K.NO_SELLERS_JSON: ("{{domain}}のsellers.jsonが見つかりません。", "広告システムがsellers.jsonを公開していません。"),
        K.DIRECT_ACCOUNT_ID_NOT_IN_SELLERS_JSON: (
            "アカウントID {{account_id}} は{{domain}}のsellers.jsonに記載されていません（DIRECT）。",
            "DIRECTエントリはsellers.jsonのseller_idと一致する必要があります。"),
        K.RESELLER_ACCOUNT_ID_NOT_IN_SELLERS_JSON: (
            "アカウントID {{account_id}} は{{domain}}のsellers.jsonに記載されていません（RESELLER）。",
            "RESELLERエントリはsellers.jsonのseller_idと一致する必要があります。"),
        K.DOMAIN_MISMATCH: ("sellers.jsonのドメイン{{seller_domain}}が{{publisher_domain}}と一致しません。",
                            "OWNERDOMAINまたはMANAGERDOMAINと一致する必要があります。"),
        K.DIRECT_NOT_PUBLISHER: ("DIRECTエントリ{{account_id}}（{{domain}}）のseller_typeは{{seller_type}}です。",
                                 "DIRECTエントリのseller_typeはPUBLISHERまたはBOTHである必要があります。"),
        K.SELLER_ID_NOT_UNIQUE: ("seller_id {{account_id}} が{{domain}}のsellers.jsonに複数回記載されています。",
                                 "seller_idはsellers.json内で一意である必要があります。"),
        K.RESELLER_NOT_INTERMEDIARY: ("RESELLERエントリ{{account_id}}（{{domain}}）のseller_typeは{{seller_type}}です。",
                                      "RESELLERエントリのseller_typeはINTERMEDIARYまたはBOTHである必要があります。"),
        K.SELLERS_JSON_VALIDATION_ERROR: ("{{domain}}のsellers.jsonを確認できませんでした: {{message}}",
                                          "次回の実行時に再確認されます。"),
        K.EMPTY_FILE: ("ads.txtファイルが空です。", "少なくとも1件のレコードを追加してください。"),
        K.INVALID_CHARACTERS: ("制御文字または表示できない文字が含まれています。",
                               "不可視文字を削除し、UTF-8のテキストとして保存してください。"),
    },
}

HELP_PATH = "/help/validation#{key}"

ERROR_KEYS = {
    K.MISSING_FIELDS, K.INVALID_FORMAT, K.INVALID_RELATIONSHIP, K.INVALID_DOMAIN, K.EMPTY_ACCOUNT_ID,
    K.EMPTY_FILE, K.INVALID_CHARACTERS, K.DIRECT_ACCOUNT_ID_NOT_IN_SELLERS_JSON,
    K.RESELLER_ACCOUNT_ID_NOT_IN_SELLERS_JSON,
}
WARNING_KEYS = {
    K.NO_SELLERS_JSON, K.DOMAIN_MISMATCH, K.DIRECT_NOT_PUBLISHER, K.RESELLER_NOT_INTERMEDIARY,
    K.SELLER_ID_NOT_UNIQUE, K.SELLERS_JSON_VALIDATION_ERROR,
}


@dataclass(frozen=True)
class MessageData:
    message: str
    description: Optional[str] = None
    help_url: Optional[str] = None


@dataclass(frozen=True)
class ValidationMessage:
    key: str
    severity: Severity
    message: str
    description: Optional[str] = None
    help_url: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self):
        return {
            "key": self.key,
            "severity": self.severity.value,
            "message": self.message,
            "description": self.description,
            "help_url": self.help_url,
        }


class MessageProvider(Protocol):
    def get_message(self, key: str, locale: Optional[str] = None) -> Optional[MessageData]: ...

    def format_message(self, key: str, params: Mapping[str, Any], locale: Optional[str] = None) -> Optional[ValidationMessage]: ...


def supported_locales() -> List[str]:
    return list(MESSAGES)


def is_supported_locale(locale: str) -> bool:
    return locale in MESSAGES


def fill_placeholders(template: str, params: Mapping[str, Any]) -> str:
    def sub(m):
        value = params.get(m.group(1))
        return m.group(0) if value is None else str(value)
    return PLACEHOLDER_RE.sub(sub, template)


def severity_for_key(key: str) -> Severity:
    if key in ERROR_KEYS:
        return Severity.ERROR
    if key in WARNING_KEYS:
        return Severity.WARNING
    return Severity.INFO


class DefaultMessageProvider:
    def __init__(self, default_locale: str = "en", base_url: Optional[str] = None):
        if not is_supported_locale(default_locale):
            raise ValueError(f"unsupported locale {default_locale!r}; expected one of {supported_locales()}")
        self.default_locale = default_locale
        self.base_url = base_url

    def _help_url(self, key):
        path = HELP_PATH.format(key=key)
        if self.base_url:
            return self.base_url.rstrip("/") + path
        return path

    def get_message(self, key, locale=None):
        bundle = MESSAGES.get(locale or self.default_locale) or MESSAGES[self.default_locale]
        if key not in bundle:
            return None
        message, description = bundle[key]
        return MessageData(message=message, description=description, help_url=self._help_url(key))

    def format_message(self, key, params, locale=None):
        data = self.get_message(key, locale)
        if data is None:
            return None
        return ValidationMessage(
            key=key,
            severity=severity_for_key(key),
            message=fill_placeholders(data.message, params),
            description=fill_placeholders(data.description, params) if data.description else None,
            help_url=data.help_url,
            params=dict(params),
        )


def describe_entry(entry, provider: MessageProvider, locale: Optional[str] = None) -> List[ValidationMessage]:
    """Messages for an entry's error or warnings, in warning order."""
    out = []
    if getattr(entry, "all_warnings", None):
        for w in entry.all_warnings:
            msg = provider.format_message(w.key, w.params, locale)
            if msg:
                out.append(msg)
    elif getattr(entry, "validation_key", None):
        msg = provider.format_message(entry.validation_key, entry.warning_params or {}, locale)
        if msg:
            out.append(msg)
    return out
