from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Mapping, Sequence
from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from types import MappingProxyType, UnionType
from typing import Annotated, Any, Final, NamedTuple, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, GetCoreSchemaHandler, ValidationError
from pydantic_core import PydanticCustomError, core_schema
from starlette.datastructures import ImmutableMultiDict
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from apiconv.core.i18n import MALFORMED, MALFORMED_KEY, Translator, rule_key

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Predicate = Callable[[Any], bool]

# Validation-context key under which the active RuleSet is handed to pydantic.
RULES_CONTEXT_KEY: Final = "apiconv.rules"

_EMAIL_RE: Final = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_NUMERIC_RE: Final = re.compile(r"^[-+]?[0-9]+(?:\.[0-9]+)?$")

BUILTIN_RULES: Final[Mapping[str, Predicate]] = MappingProxyType(
    {
        "email": lambda v: bool(_EMAIL_RE.match(str(v))),
        "alphanum": lambda v: str(v).isascii() and str(v).isalnum(),
        "numeric": lambda v: bool(_NUMERIC_RE.match(str(v))),
        "lowercase": lambda v: str(v) == str(v).lower(),
        "uppercase": lambda v: str(v) == str(v).upper(),
    }
)

_BODYLESS_METHODS: Final = frozenset({"GET", "HEAD", "DELETE"})
_FORM_TYPES: Final = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})
_SEQUENCE_TYPES: Final = (list, tuple, set, frozenset, Sequence, AbstractSet)


class RuleContextError(RuntimeError):
    """A field uses `Rule(...)` but the model was not validated through a `Validator`."""


class MalformedPayloadError(ValueError):
    pass


class RuleSet:
    """Named field predicates, built-ins first.

    Modules register their rules at import/startup time while requests may already
    be validating, so registration swaps in a new snapshot under a lock.
    """

    def __init__(self, builtins: Mapping[str, Predicate] = BUILTIN_RULES) -> None:
        self._builtin_names = frozenset(builtins)
        self._lock = threading.Lock()
        self._rules: Mapping[str, Predicate] = MappingProxyType(dict(builtins))

    def register(self, name: str, predicate: Predicate) -> None:
        if not name or not name.isidentifier():
            raise ValueError(f"Invalid rule name {name!r}")
        if name in self._builtin_names:
            raise ValueError(f"Rule {name!r} is built in and cannot be replaced")

        with self._lock:
            if name in self._rules:
                logger.warning("Replacing validation rule %r", name)
            rules = dict(self._rules)
            rules[name] = predicate
            self._rules = MappingProxyType(rules)

    def get(self, name: str) -> Predicate | None:
        return self._rules.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._rules


@dataclass(frozen=True)
class Rule:
    """Attach a named rule to a field: `phone: Annotated[str, Rule("mobile")]`."""

    name: str

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.with_info_after_validator_function(self._check, handler(source_type))

    def _check(self, value: Any, info: core_schema.ValidationInfo) -> Any:
        rules = (info.context or {}).get(RULES_CONTEXT_KEY)
        if rules is None:
            raise RuleContextError(f"Rule {self.name!r} needs a Validator; use bind_and_validate() or validated_body()")

        predicate = rules.get(self.name)
        if predicate is None:
            raise RuleContextError(f"Unknown validation rule {self.name!r}")

        if not predicate(value):
            raise PydanticCustomError(
                rule_key(self.name), "value does not satisfy the '{rule}' rule", {"rule": self.name}
            )
        return value


class BindResult(NamedTuple):
    ok: bool
    errors: dict[str, str]
    value: Any = None


def _is_sequence(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin is Annotated:
        return _is_sequence(get_args(annotation)[0])
    if origin in (Union, UnionType):
        return any(_is_sequence(arg) for arg in get_args(annotation) if arg is not type(None))
    return annotation in _SEQUENCE_TYPES or origin in _SEQUENCE_TYPES


def _sequence_keys(model: type[BaseModel] | None) -> frozenset[str]:
    """Wire names of the model's list-like fields."""

    if model is None:
        return frozenset()
    keys: set[str] = set()
    for name, info in model.model_fields.items():
        if not _is_sequence(info.annotation):
            continue
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
        if isinstance(info.validation_alias, str):
            keys.add(info.validation_alias)
    return frozenset(keys)


def _to_plain_dict(items: ImmutableMultiDict, sequence_keys: frozenset[str] = frozenset()) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in items.keys():
        values = items.getlist(key)
        out[key] = values if key in sequence_keys or len(values) > 1 else values[0]
    return out


async def read_payload(request: Request, model: type[BaseModel] | None = None) -> Any:
    """Pick the binding source the way a framework binder would.

    Query string for body-less methods, form data for form content types, the raw
    JSON body otherwise. Query and form keys bound to a list field of `model` are
    always passed as lists. Raises `MalformedPayloadError` when nothing usable is sent.
    """

    if request.method in _BODYLESS_METHODS:
        return _to_plain_dict(request.query_params, _sequence_keys(model))

    media_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()

    if media_type in _FORM_TYPES:
        try:
            form = await request.form()
        except MultiPartException as exc:
            raise MalformedPayloadError(str(exc)) from exc
        return _to_plain_dict(form, _sequence_keys(model))

    if media_type in ("", "application/json") or media_type.endswith("+json"):
        body = await request.body()
        if not body.strip():
            raise MalformedPayloadError("empty request body")
        return body

    raise MalformedPayloadError(f"unsupported content type {media_type!r}")


class Validator:
    """Binds payloads to pydantic models and reports failures as field -> message."""

    def __init__(self, translator: Translator, rules: RuleSet | None = None) -> None:
        self.translator = translator
        self.rules = rules if rules is not None else RuleSet()

    def register_rule(self, name: str, predicate: Predicate, message: str) -> None:
        """Add a custom rule and its message template (in the translator's locale).

        `message` may use `{field}`, e.g. `"{field} must be a valid mobile number"`.
        """

        self.rules.register(name, predicate)
        self.translator.add(rule_key(name), message)

    def malformed(self) -> BindResult:
        return BindResult(False, {MALFORMED_KEY: self.translator.template(MALFORMED) or "malformed request"})

    def validate(self, payload: Any, model: type[M]) -> BindResult:
        context = {RULES_CONTEXT_KEY: self.rules}
        try:
            if isinstance(payload, (bytes, bytearray, str)):
                value = model.model_validate_json(payload, context=context)
            else:
                value = model.model_validate(payload, context=context)
        except ValidationError as exc:
            errors = self.translator.translate(exc.errors())
            logger.debug("Validation failed for %s: %s", model.__name__, errors)
            return BindResult(False, errors)

        return BindResult(True, {}, value)

    async def bind_and_validate(self, request: Request, model: type[M]) -> BindResult:
        try:
            payload = await read_payload(request, model)
        except MalformedPayloadError as exc:
            logger.debug("Malformed request payload: %s", exc)
            return self.malformed()

        return self.validate(payload, model)
