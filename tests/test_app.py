import logging

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from apiconv.core.codes import NOT_FOUND
from apiconv.core.conventions import build_conventions
from apiconv.core.errors import ErrorCode
from apiconv.core.i18n import LocaleNotSupportedError
from apiconv.core.logging import RequestIdFilter
from apiconv.core.request_id import current_request_id
from apiconv.main import create_app
from apiconv.settings import Settings, get_settings


def test_health(settings):
    client = TestClient(create_app(settings))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"code": 0, "msg": "success", "data": {"ok": True}}


def test_request_id_is_echoed(settings):
    client = TestClient(create_app(settings))

    given = client.get("/health", headers={"X-Request-ID": "rid-123"})
    generated = client.get("/health")

    assert given.headers["X-Request-ID"] == "rid-123"
    assert len(generated.headers["X-Request-ID"]) == 36


def test_request_id_header_is_configurable():
    settings = Settings(_env_file=None, request_id_header="X-Trace-ID")
    client = TestClient(create_app(settings))

    response = client.get("/health", headers={"X-Trace-ID": "trace-1"})

    assert response.headers["X-Trace-ID"] == "trace-1"


def test_configured_overrides_apply_to_raised_errors():
    settings = Settings(_env_file=None, status_overrides={"2001004": 401})
    app = create_app(settings)

    @app.get("/session")
    def session():
        raise ErrorCode(2_001_004, "session expired")

    response = TestClient(app).get("/session")

    assert response.status_code == 401
    assert response.json() == {"code": 2_001_004, "msg": "session expired"}


def test_zh_app_renders_chinese_field_errors():
    app = create_app(Settings(_env_file=None, locale="zh"))

    @app.get("/items")
    def items(limit: int):
        return {"limit": limit}

    response = TestClient(app).get("/items")

    assert response.status_code == 400
    assert response.json()["msg"] == "参数错误"
    assert response.json()["data"] == {"limit": "limit为必填字段"}


def test_create_app_uses_environment(monkeypatch):
    monkeypatch.setenv("LOCALE", "zh")
    monkeypatch.setenv("STATUS_OVERRIDES", "2001004=401")
    get_settings.cache_clear()

    app = create_app()
    conventions = app.state.conventions

    assert conventions.translator.locale == "zh"
    assert conventions.registry.resolve(2_001_004) == 401


def test_status_overrides_from_json_env(monkeypatch):
    monkeypatch.setenv("STATUS_OVERRIDES", '{"2001004": 401, "2001005": 404}')

    settings = Settings(_env_file=None)

    assert settings.status_overrides == {2_001_004: 401, 2_001_005: 404}


def test_status_overrides_from_csv_env(monkeypatch):
    monkeypatch.setenv("STATUS_OVERRIDES", "2001004=401, 2001005=404,")

    settings = Settings(_env_file=None)

    assert settings.status_overrides == {2_001_004: 401, 2_001_005: 404}


@pytest.mark.parametrize("raw", ["2001004:401", '["2001004"]', "abc=401"])
def test_invalid_status_overrides_are_rejected(monkeypatch, raw):
    monkeypatch.setenv("STATUS_OVERRIDES", raw)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_unsupported_locale_is_rejected(monkeypatch):
    monkeypatch.setenv("LOCALE", "fr")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_build_conventions_fails_fast_on_unknown_locale(settings):
    broken = settings.model_copy(update={"locale": "fr"})

    with pytest.raises(LocaleNotSupportedError):
        build_conventions(broken)


def test_defaults(settings):
    assert settings.locale == "en"
    assert settings.log_level == "INFO"
    assert settings.request_id_header == "X-Request-ID"
    assert settings.status_overrides == {}
    assert settings.port == 8080


def test_request_id_filter():
    record = logging.LogRecord("apiconv", logging.INFO, __file__, 1, "hello", None, None)

    RequestIdFilter().filter(record)
    assert record.request_id == "-"

    token = current_request_id.set("rid-9")
    try:
        RequestIdFilter().filter(record)
    finally:
        current_request_id.reset(token)
    assert record.request_id == "rid-9"


def test_unhandled_error_response_carries_request_id(settings):
    app = create_app(settings)

    @app.get("/boom")
    def boom():
        raise RuntimeError("secret stack detail")

    response = TestClient(app, raise_server_exceptions=False).get("/boom", headers={"X-Request-ID": "rid-500"})

    assert response.status_code == 500
    assert response.headers["X-Request-ID"] == "rid-500"
    assert "secret" not in response.text


def test_zh_app_localizes_default_code_messages():
    app = create_app(Settings(_env_file=None, locale="zh"))

    @app.get("/videos/{video_id}")
    def video(video_id: str):
        if video_id == "gone":
            raise NOT_FOUND
        raise NOT_FOUND.with_message("video not found")

    client = TestClient(app)

    assert client.get("/health").json()["msg"] == "成功"
    assert client.get("/videos/gone").json() == {"code": NOT_FOUND.code, "msg": "资源不存在"}
    assert client.get("/videos/v1").json()["msg"] == "video not found"
    assert client.get("/nowhere").json()["msg"] == "资源不存在"
