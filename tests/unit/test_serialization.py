import json

import pytest

from tps.errors import FormatError
from tps.provider import ProviderSpecification
from tps.serialization import (
    SCHEMA_VERSION,
    deserialize,
    dump_providers,
    load_providers,
    serialize,
)

PROVIDER_SOURCE = """
@tracer
class ServerProbes(Protocol):
    \"\"\"Probes for the HTTP server.\"\"\"

    def request(path: str, method: Optional[str], size: ctypes.c_uint32): ...

    def shutdown(): ...
"""


def _spec() -> ProviderSpecification:
    return ProviderSpecification.from_source(PROVIDER_SOURCE)


def _tampered(**changes: object) -> bytes:
    payload = json.loads(serialize(_spec()))
    payload.update(changes)
    return json.dumps(payload).encode("utf-8")


def test_tps_ser_001_round_trip_preserves_all_observable_fields() -> None:
    spec = _spec()

    restored = deserialize(serialize(spec))

    assert restored == spec
    assert restored.name == spec.name
    assert restored.content_hash == spec.content_hash
    assert restored.canonical_text == spec.canonical_text
    assert restored.probes == spec.probes
    assert restored.unique_name == spec.unique_name
    assert restored.class_name == "ServerProbes"


def test_tps_ser_002_serialized_form_is_versioned_json() -> None:
    payload = json.loads(serialize(_spec()).decode("utf-8"))

    assert payload["version"] == SCHEMA_VERSION
    assert payload["name"] == "server_probes"
    assert [probe["name"] for probe in payload["probes"]] == ["request", "shutdown"]
    assert payload["probes"][0]["args"][1] == {
        "name": "method",
        "python_type": "str",
        "c_type": "char *",
        "nullable": True,
    }


def test_tps_ser_003_unknown_fields_are_ignored() -> None:
    restored = deserialize(_tampered(added_later={"anything": 1}))

    assert restored == _spec()


def test_tps_ser_004_round_trip_of_separated_spec_keeps_empty_probes() -> None:
    without_probes, _ = _spec().separate_probes()

    assert deserialize(serialize(without_probes)) == without_probes


def test_tps_ser_005_provider_lists_round_trip() -> None:
    specs = [
        _spec(),
        ProviderSpecification.from_source("class Empty:\n    pass\n"),
    ]

    assert load_providers(dump_providers(specs)) == specs


def test_tps_ser_006_hash_mismatch_is_rejected() -> None:
    with pytest.raises(FormatError, match="Hash mismatch"):
        deserialize(_tampered(hash="0" * 16))


def test_tps_ser_007_modified_canonical_text_is_rejected() -> None:
    spec = _spec()
    text = spec.canonical_text.replace("shutdown", "restart")

    with pytest.raises(FormatError, match="Hash mismatch"):
        deserialize(_tampered(canonical_text=text))


def test_tps_ser_008_name_mismatch_is_rejected() -> None:
    with pytest.raises(FormatError, match="Name mismatch"):
        deserialize(_tampered(name="other_probes"))


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"\xff\xfe",
        b"[]",
        b'{"name": "a"}',
        b'{"name": "a", "hash": "b", "canonical_text": "x = 1", "probes": []}',
        b'{"name": 1, "hash": "b", "canonical_text": "class A: ...", "probes": []}',
    ],
)
def test_tps_ser_009_malformed_input_is_rejected(data: bytes) -> None:
    with pytest.raises(FormatError):
        deserialize(data)


def test_tps_ser_010_malformed_probe_records_are_rejected() -> None:
    with pytest.raises(FormatError, match="nullable"):
        deserialize(
            _tampered(
                probes=[
                    {
                        "name": "request",
                        "args": [
                            {"name": "path", "python_type": "str", "c_type": "char *"}
                        ],
                    }
                ]
            )
        )


def test_tps_ser_011_load_providers_requires_array() -> None:
    with pytest.raises(FormatError, match="JSON array"):
        load_providers(serialize(_spec()))
