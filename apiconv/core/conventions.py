from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI

from apiconv.core.codes import DEFAULT_STATUS_OVERRIDES
from apiconv.core.handlers import install_exception_handlers
from apiconv.core.i18n import Translator
from apiconv.core.response import Responder
from apiconv.core.status import StatusRegistry
from apiconv.core.validation import Validator
from apiconv.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Conventions:
    """Process-wide state shared by every request: built once, then injected."""

    settings: Settings
    registry: StatusRegistry
    translator: Translator
    validator: Validator
    responder: Responder


def build_conventions(settings: Settings) -> Conventions:
    # The translator comes first: an unsupported locale must stop startup before
    # any module gets a chance to register rules against it.
    translator = Translator(settings.locale)

    registry = StatusRegistry(DEFAULT_STATUS_OVERRIDES)
    if settings.status_overrides:
        registry.update(settings.status_overrides)

    conventions = Conventions(
        settings=settings,
        registry=registry,
        translator=translator,
        validator=Validator(translator),
        responder=Responder(registry, translator),
    )
    logger.info(
        "Conventions ready: locale=%s overrides=%d",
        translator.locale,
        len(registry.snapshot()),
    )
    return conventions


def install(app: FastAPI, conventions: Conventions) -> None:
    app.state.conventions = conventions
    install_exception_handlers(app)
