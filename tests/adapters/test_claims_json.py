from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from depmatrix.adapters.claims_json import ClaimInputError, load_claims, parse_claims

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_claims_reads_camel_case_array() -> None:
    document = json.dumps(
        [
            {
                "id": "c1",
                "sourceType": "ROUTER_LOG",
                "rawData": "GET /api/users",
                "processedData": "web-app -> user-service",
                "timestamp": "2025-06-01T11:00:00Z",
                "confidenceScore": 0.7,
            }
        ]
    )

    claims = parse_claims(document)

    assert len(claims) == 1
    claim = claims[0]
    assert claim.id == "c1"
    assert claim.source_type == "ROUTER_LOG"
    assert claim.processed_data == "web-app -> user-service"
    assert claim.timestamp == datetime(2025, 6, 1, 11, 0, tzinfo=UTC)
    assert claim.confidence == 0.7


def test_parse_claims_reads_snake_case_json_lines() -> None:
    lines = [
        {"id": "c1", "source_type": "CODEBASE", "processed_data": "a -> b"},
        {"id": "c2", "source_type": "NETWORK", "processed_data": "b -> c", "confidence": 0.4},
    ]
    document = "\n".join(json.dumps(line) for line in lines) + "\n\n"

    claims = parse_claims(document)

    assert [claim.id for claim in claims] == ["c1", "c2"]
    assert claims[0].raw_data == ""
    assert claims[0].timestamp is None
    assert claims[0].confidence is None
    assert claims[1].confidence == 0.4


def test_schema_invalid_records_are_skipped() -> None:
    document = json.dumps(
        [
            {"id": "bad-confidence", "processedData": "a -> b", "confidence": 1.5},
            {"id": "bad-timestamp", "processedData": "a -> b", "timestamp": "yesterday"},
            "not an object",
            {"id": "good", "processedData": "a -> b"},
        ]
    )

    assert [claim.id for claim in parse_claims(document)] == ["good"]


def test_malformed_json_lines_are_skipped() -> None:
    document = '{"id": "c1", "processedData": "a -> b"}\n{broken\n{"id": "c2"}\n'

    assert [claim.id for claim in parse_claims(document)] == ["c1", "c2"]


def test_malformed_json_array_raises() -> None:
    with pytest.raises(ClaimInputError, match="not valid JSON"):
        parse_claims('[{"id": "c1"},')


def test_empty_document_yields_no_claims() -> None:
    assert parse_claims("  \n") == []


def test_load_claims_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "claims.json"
    path.write_text(json.dumps([{"id": "c1", "processedData": "a -> b"}]), encoding="utf-8")

    assert [claim.id for claim in load_claims(path)] == ["c1"]


def test_load_claims_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ClaimInputError, match="Unable to read"):
        load_claims(tmp_path / "missing.json")


def test_load_claims_reports_undecodable_file(tmp_path: Path) -> None:
    path = tmp_path / "claims.json"
    path.write_bytes(b"\xff\xfe[{}]")

    with pytest.raises(ClaimInputError, match="Unable to read"):
        load_claims(path)
