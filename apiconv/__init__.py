"""HTTP API conventions for FastAPI: business codes, response envelopes, field-level validation errors."""

from apiconv.core.codes import (
    DEFAULT_STATUS_OVERRIDES,
    FORBIDDEN,
    INVALID_PARAMS,
    NOT_FOUND,
    SERVER_ERROR,
    SUCCESS,
    TOO_MANY_REQUESTS,
    UNAUTHORIZED,
)
from apiconv.core.conventions import Conventions, build_conventions, install
from apiconv.core.dependencies import get_conventions, get_responder, get_validator, validated_body
from apiconv.core.errors import ErrorCode, is_business_error
from apiconv.core.i18n import LocaleNotSupportedError, Translator
from apiconv.core.response import Responder
from apiconv.core.status import StatusRegistry, status_from_code_range
from apiconv.core.validation import BindResult, Rule, RuleContextError, RuleSet, Validator
from apiconv.schemas.common import ApiResponse
from apiconv.settings import Settings, get_settings

__all__ = [
    "ApiResponse",
    "BindResult",
    "Conventions",
    "DEFAULT_STATUS_OVERRIDES",
    "ErrorCode",
    "FORBIDDEN",
    "INVALID_PARAMS",
    "LocaleNotSupportedError",
    "NOT_FOUND",
    "Responder",
    "Rule",
    "RuleContextError",
    "RuleSet",
    "SERVER_ERROR",
    "SUCCESS",
    "Settings",
    "StatusRegistry",
    "TOO_MANY_REQUESTS",
    "Translator",
    "UNAUTHORIZED",
    "Validator",
    "build_conventions",
    "get_conventions",
    "get_responder",
    "get_settings",
    "get_validator",
    "install",
    "is_business_error",
    "status_from_code_range",
    "validated_body",
]
