"""Tests for agreement parsing, target rendering and restore requests."""

from __future__ import annotations

import json

import pytest

from bluejay.core.errors import MissingFieldError, ParseError
from bluejay.deploy.agreement import (
    DatabaseKind,
    MonitoringTarget,
    RestoreRequest,
    agreement_name,
    exporter_hostname,
    load_agreement,
    parse_agreement,
    render_targets,
)


class TestAgreementName:
    """Tests for agreement_name()."""

    @pytest.mark.parametrize(
        ("agreement_id", "expected"),
        [
            ("acme_v2", "acme"),
            ("solo", "solo"),
            ("tpa_class_2024_q1", "tpa"),
            ("_leading", ""),
        ],
    )
    def test_segment_before_first_underscore(self, agreement_id, expected):
        assert agreement_name(agreement_id) == expected

    def test_exporter_hostname(self):
        assert exporter_hostname("acme") == "exporter.acme.governify.io"


class TestParseAgreement:
    """Tests for parse_agreement()."""

    def test_valid(self):
        data = parse_agreement('{"id": "acme_v2", "context": {}}')
        assert data["id"] == "acme_v2"

    def test_malformed_json(self):
        with pytest.raises(ParseError) as exc_info:
            parse_agreement("{", source="agreements/bad.json")
        assert exc_info.value.context.path == "agreements/bad.json"
        assert exc_info.value.category.value == "PARSE"

    def test_not_an_object(self):
        with pytest.raises(ParseError):
            parse_agreement('["acme_v2"]')

    def test_missing_id_is_key_error(self):
        with pytest.raises(MissingFieldError) as exc_info:
            parse_agreement('{"name": "acme"}')
        assert isinstance(exc_info.value, KeyError)
        assert exc_info.value.field_name == "id"

    def test_non_string_id(self):
        with pytest.raises(ParseError):
            parse_agreement('{"id": 42}')

    def test_invalid_utf8_file(self, tmp_path):
        path = tmp_path / "acme.json"
        path.write_bytes(b'{"id": "acme\xff_v2"}')
        with pytest.raises(ParseError) as exc_info:
            load_agreement(path)
        assert exc_info.value.context.path == str(path)


class TestMonitoringTarget:
    """Tests for MonitoringTarget and render_targets()."""

    def test_exact_document(self):
        text = render_targets([MonitoringTarget.for_agreement("acme")])
        assert json.loads(text) == [{
            "targets": ["exporter.acme.governify.io"],
            "labels": {"__metrics_path__": "/metrics", "monitoring": "acme"},
        }]

    def test_label_order_preserved(self):
        text = render_targets([MonitoringTarget.for_agreement("acme")])
        assert text.index("__metrics_path__") < text.index("monitoring")
        assert text.index('"targets"') < text.index('"labels"')

    def test_non_ascii_kept(self):
        text = render_targets([MonitoringTarget.for_agreement("café")])
        assert '"monitoring": "café"' in text


class TestRestoreRequest:
    """Tests for RestoreRequest payloads."""

    def test_mongo_payload(self):
        payload = RestoreRequest.build(DatabaseKind.MONGO, "script();", "mongo/dump.gz").to_payload()
        assert payload == {
            "scriptText": "script();",
            "scriptConfig": {
                "dbName": "mongo-registry",
                "dbUrl": "mongodb://falcon-mongo-registry",
                "dbType": "Mongo",
                "backup": "mongo/dump.gz",
            },
        }

    def test_influx_coordinates(self):
        assert DatabaseKind.INFLUX.db_name == "influx-reporter"
        assert DatabaseKind.INFLUX.db_url == "http://falcon-influx-reporter:8086"

    def test_payload_is_json_serializable(self):
        payload = RestoreRequest.build(DatabaseKind.INFLUX, "s", "b").to_payload()
        assert json.loads(json.dumps(payload))["scriptConfig"]["dbType"] == "Influx"
