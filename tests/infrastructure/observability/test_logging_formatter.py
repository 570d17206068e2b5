import json
import logging
import sys

from sessionvault.observability.logging import ExtrasFormatter, build_log_config


def _record(msg: str, *, level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="sessionvault.service",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_formatter_appends_data_outside_managed_runtimes(monkeypatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    record = _record("token issued")
    record.data = {"key": "a1b2c3", "replaced": False}

    rendered = formatter.format(record)

    assert rendered.startswith("INFO sessionvault.service: token issued")
    assert 'data={"key":"a1b2c3","replaced":false}' in rendered


def test_formatter_leaves_plain_records_alone(monkeypatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    assert formatter.format(_record("token invalidated")) == "INFO sessionvault.service: token invalidated"


def test_formatter_emits_json_payload_in_kubernetes(monkeypatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    record = _record("token stored")
    record.data = {"key": "a1b2c3", "encoded": b"hello", "shards": {1, 2}}

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "token stored"
    assert payload["severity"] == "INFO"
    assert payload["logger"] == "sessionvault.service"
    assert payload["data"]["key"] == "a1b2c3"
    assert payload["data"]["encoded"] == "<bytes len=5>"
    assert sorted(payload["data"]["shards"]) == [1, 2]


def test_formatter_emits_exception_in_cloud_run(monkeypatch) -> None:
    monkeypatch.setenv("K_SERVICE", "sessionvault")
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    try:
        raise ValueError("boom")
    except ValueError:
        exc_info = sys.exc_info()

    payload = json.loads(
        formatter.format(_record("stored token payload failed to decode", level=logging.WARNING, exc_info=exc_info))
    )

    assert payload["severity"] == "WARNING"
    assert "ValueError: boom" in payload["exception"]


def test_build_log_config_routes_package_loggers_to_console() -> None:
    config = build_log_config(level="debug", extra_loggers={"urllib3": {"level": "ERROR"}})

    assert config["version"] == 1
    assert config["disable_existing_loggers"] is False
    assert config["loggers"]["sessionvault"]["level"] == "DEBUG"
    assert config["loggers"]["sessionvault"]["handlers"] == ["console"]
    assert config["loggers"]["sessionvault.store"]["propagate"] is True
    assert config["loggers"]["urllib3"] == {"level": "ERROR"}
    assert config["handlers"]["console"]["filters"] == ["otel_context"]
    assert config["formatters"]["console"]["()"] is ExtrasFormatter
