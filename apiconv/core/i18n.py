from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Final

# Synthetic catalog keys for the two fixed messages.
TYPE_MISMATCH: Final = "_type_mismatch"
MALFORMED: Final = "_malformed"

# Field key used when the payload as a whole could not be parsed.
MALFORMED_KEY: Final = "request"

# Field key for errors raised by model-level validators on a well-formed payload.
ROOT_KEY: Final = "__root__"

# Named rules and business codes live in their own key spaces so they can never
# shadow a pydantic error type.
RULE_PREFIX: Final = "rule:"
CODE_PREFIX: Final = "code:"

# Leading location segments FastAPI adds to RequestValidationError locations.
REQUEST_SOURCES: Final = frozenset({"body", "query", "path", "header", "cookie"})

# Keys are pydantic error types, `rule:<name>` or `code:<code>`. Placeholders are
# `{field}` plus whatever the pydantic error context provides (`ge`, `min_length`, ...).
_EN: Final[dict[str, str]] = {
    TYPE_MISMATCH: "wrong data type",
    MALFORMED: "malformed request",
    "missing": "{field} is a required field",
    "string_too_short": "{field} must be at least {min_length} characters in length",
    "string_too_long": "{field} must be a maximum of {max_length} characters in length",
    "too_short": "{field} must contain at least {min_length} items",
    "too_long": "{field} must contain at most {max_length} items",
    "greater_than": "{field} must be greater than {gt}",
    "greater_than_equal": "{field} must be {ge} or greater",
    "less_than": "{field} must be less than {lt}",
    "less_than_equal": "{field} must be {le} or less",
    "multiple_of": "{field} must be a multiple of {multiple_of}",
    "string_pattern_mismatch": "{field} has an invalid format",
    "literal_error": "{field} must be one of [{expected}]",
    "enum": "{field} must be one of [{expected}]",
    "extra_forbidden": "{field} is not allowed",
    "value_error": "{error}",
    "assertion_error": "{error}",
    "rule:email": "{field} must be a valid email address",
    "rule:alphanum": "{field} can only contain alphanumeric characters",
    "rule:numeric": "{field} must be a valid numeric value",
    "rule:lowercase": "{field} must be a lowercase string",
    "rule:uppercase": "{field} must be an uppercase string",
}

_ZH: Final[dict[str, str]] = {
    TYPE_MISMATCH: "数据类型错误",
    MALFORMED: "请求参数格式错误",
    "missing": "{field}为必填字段",
    "string_too_short": "{field}长度必须至少为{min_length}个字符",
    "string_too_long": "{field}长度不能超过{max_length}个字符",
    "too_short": "{field}必须至少包含{min_length}项",
    "too_long": "{field}最多只能包含{max_length}项",
    "greater_than": "{field}必须大于{gt}",
    "greater_than_equal": "{field}必须大于或等于{ge}",
    "less_than": "{field}必须小于{lt}",
    "less_than_equal": "{field}必须小于或等于{le}",
    "multiple_of": "{field}必须是{multiple_of}的倍数",
    "string_pattern_mismatch": "{field}格式不正确",
    "literal_error": "{field}必须是[{expected}]中的一个",
    "enum": "{field}必须是[{expected}]中的一个",
    "extra_forbidden": "{field}是不允许的字段",
    "value_error": "{error}",
    "assertion_error": "{error}",
    "rule:email": "{field}必须是一个有效的邮箱",
    "rule:alphanum": "{field}只能包含字母和数字",
    "rule:numeric": "{field}必须是一个有效的数值",
    "rule:lowercase": "{field}必须是小写字母",
    "rule:uppercase": "{field}必须是大写字母",
    "code:0": "成功",
    "code:10000000": "服务内部错误",
    "code:10000001": "参数错误",
    "code:10000002": "资源不存在",
    "code:10000003": "未授权",
    "code:10000004": "禁止访问",
    "code:10000007": "请求过多",
}

CATALOGS: Final[Mapping[str, Mapping[str, str]]] = MappingProxyType({"en": _EN, "zh": _ZH})


class LocaleNotSupportedError(ValueError):
    pass


class _Placeholders(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def rule_key(name: str) -> str:
    return RULE_PREFIX + name


def code_key(code: int) -> str:
    return f"{CODE_PREFIX}{code}"


def is_type_mismatch(error_type: str) -> bool:
    return error_type.endswith(("_type", "_parsing")) or error_type == "int_from_float"


def is_malformed(error_type: str, parts: tuple[Any, ...]) -> bool:
    """Undecodable JSON, or a payload whose root is missing or not an object.

    `parts` is the error location with any request-source segment removed. Other
    root-level errors (model validators) are rule violations, not malformed input.
    """

    if error_type == "json_invalid":
        return True
    if parts:
        return False
    return error_type == "missing" or is_type_mismatch(error_type)


def strip_source(loc: Iterable[Any]) -> tuple[Any, ...]:
    """Drop the leading `body`/`query`/... segment FastAPI puts on request errors."""

    parts = tuple(loc)
    if parts and parts[0] in REQUEST_SOURCES:
        return parts[1:]
    return parts


def field_key(parts: Iterable[Any]) -> str:
    """`('address', 'city')` -> `'address.city'`; the root is `ROOT_KEY`."""

    return ".".join(str(part) for part in parts) or ROOT_KEY


class Translator:
    """Renders pydantic validation errors as field -> message in one locale.

    The catalog is copied at construction and replaced wholesale on `add`, so a
    failure set is always rendered against one consistent snapshot.
    """

    def __init__(self, locale: str = "en") -> None:
        base = CATALOGS.get(locale)
        if base is None:
            raise LocaleNotSupportedError(
                f"Unsupported locale {locale!r}; expected one of: {', '.join(sorted(CATALOGS))}"
            )
        self.locale = locale
        self._lock = threading.Lock()
        self._catalog: Mapping[str, str] = MappingProxyType(dict(base))

    def add(self, key: str, template: str, *, override: bool = True) -> None:
        with self._lock:
            if not override and key in self._catalog:
                return
            catalog = dict(self._catalog)
            catalog[key] = template
            self._catalog = MappingProxyType(catalog)

    def template(self, key: str) -> str | None:
        return self._catalog.get(key)

    def translate(self, errors: Iterable[Mapping[str, Any]], *, strip_sources: bool = False) -> dict[str, str]:
        """Render `errors` (pydantic `ValidationError.errors()` items).

        Pass `strip_sources=True` for FastAPI `RequestValidationError`s, whose
        locations start with the request part (`body`, `query`, ...).
        """

        catalog = self._catalog
        out: dict[str, str] = {}

        for error in errors:
            loc = error.get("loc", ())
            parts = strip_source(loc) if strip_sources else tuple(loc)
            error_type = error.get("type", "")
            if is_malformed(error_type, parts):
                return {MALFORMED_KEY: catalog[MALFORMED]}

            key = field_key(parts)
            if key in out:
                continue

            if not error_type.startswith(RULE_PREFIX) and is_type_mismatch(error_type):
                out[key] = catalog[TYPE_MISMATCH]
                continue

            template = catalog.get(error_type)
            if template is None:
                out[key] = str(error.get("msg", ""))
                continue

            field = str(parts[-1]) if parts else ROOT_KEY
            out[key] = template.format_map(_Placeholders(error.get("ctx") or {}, field=field))

        return out
