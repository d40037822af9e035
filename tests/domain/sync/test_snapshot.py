"""Tests for the snapshot codec."""

import json
from datetime import datetime, timezone

import pytest
from loguru import logger

from anitrack.domain.sync import snapshot as codec
from anitrack.domain.sync.snapshot import FORMAT_VERSION, SnapshotMetadata
from anitrack.exceptions import FormatError, VersionError

CREATED = datetime(2024, 1, 31, 22, 59, 59, tzinfo=timezone.utc)


@pytest.fixture
def metadata():
    return SnapshotMetadata(
        app_version="0.4.0",
        os="linux",
        device_name="laptop",
        export_scope="all",
        entry_count=0,
    )


@pytest.fixture
def warnings_logged():
    """Collect loguru warnings emitted during the test."""
    messages = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)


def _document(**overrides) -> bytes:
    document = {
        "format_version": "2.0",
        "created_at": "2024-01-31T22:59:59+00:00",
        "metadata": {
            "app_version": "0.4.0",
            "os": "linux",
            "device_name": "laptop",
            "export_scope": "all",
            "entry_count": 1,
        },
        "entries": [{"id": 1, "status": "watching", "score": 8}],
    }
    document.update(overrides)
    return json.dumps(document).encode("utf-8")


class TestSerialize:
    def test_document_layout(self, make_entry, metadata):
        data = codec.serialize([make_entry(1)], metadata, CREATED)
        document = json.loads(data.decode("utf-8"))

        assert list(document) == ["format_version", "created_at", "metadata", "entries"]
        assert document["format_version"] == FORMAT_VERSION
        assert document["created_at"] == "2024-01-31T22:59:59+00:00"
        assert list(document["metadata"]) == [
            "app_version",
            "os",
            "device_name",
            "export_scope",
            "entry_count",
        ]
        assert document["entries"][0]["image_reference"] == "https://img.example/1.jpg"

    def test_entry_count_is_computed_not_trusted(self, make_entry, metadata):
        lying = SnapshotMetadata(
            app_version="0.4.0",
            os="linux",
            device_name="laptop",
            export_scope="all",
            entry_count=99,
        )
        data = codec.serialize([make_entry(1), make_entry(2)], lying, CREATED)

        assert json.loads(data)["metadata"]["entry_count"] == 2

    def test_output_is_deterministic(self, make_entry, metadata):
        entries = [make_entry(3), make_entry(1), make_entry(2)]
        first = codec.serialize(entries, metadata, CREATED)
        second = codec.serialize(entries, metadata, CREATED)

        assert first == second

    def test_non_ascii_is_written_as_utf8(self, make_entry, metadata):
        data = codec.serialize([make_entry(1, title="進撃の巨人")], metadata, CREATED)

        assert "進撃の巨人".encode("utf-8") in data

    def test_parse_returns_what_was_serialized(self, make_entry, metadata):
        entries = [make_entry(2, status="completed", end_date="2023-12-01"), make_entry(1)]
        snap = codec.parse(codec.serialize(entries, metadata, CREATED))

        assert snap.entries == tuple(entries)
        assert snap.created_at == CREATED
        assert snap.metadata.device_name == "laptop"
        assert snap.metadata.entry_count == 2


class TestParseErrors:
    def test_invalid_json(self):
        with pytest.raises(FormatError, match="not valid JSON"):
            codec.parse(b'{"format_version": "2.0", ')

    def test_invalid_utf8(self):
        with pytest.raises(FormatError, match="UTF-8"):
            codec.parse(b"\xff\xfe\x00garbage")

    def test_document_must_be_object(self):
        with pytest.raises(FormatError, match="JSON object"):
            codec.parse(b"[1, 2, 3]")

    def test_missing_version(self):
        with pytest.raises(FormatError, match="no format version"):
            codec.parse(b'{"entries": []}')

    def test_entries_must_be_list(self):
        with pytest.raises(FormatError, match="must be a list"):
            codec.parse(_document(entries={"id": 1}))

    def test_entry_must_be_object(self):
        with pytest.raises(FormatError, match="Entry #1"):
            codec.parse(_document(entries=[{"id": 1, "status": "planned"}, "oops"]))

    def test_bad_timestamp(self):
        with pytest.raises(FormatError, match="timestamp"):
            codec.parse(_document(created_at="yesterday"))

    @pytest.mark.parametrize("version", ["3.0", "0.9", "10.1.2", "beta"])
    def test_unsupported_major_version(self, version):
        with pytest.raises(VersionError) as exc_info:
            codec.parse(_document(format_version=version))
        assert exc_info.value.format_version == version


class TestParseLeniency:
    def test_newer_minor_version_and_unknown_fields_are_ignored(self):
        data = _document(
            format_version="2.7.1",
            checksum="abc",
            entries=[{"id": 1, "status": "watching", "rewatch_count": 2}],
        )
        snap = codec.parse(data)

        assert snap.format_version == "2.7.1"
        assert snap.entries[0].id == 1

    def test_missing_optional_fields_take_empty_values(self):
        snap = codec.parse(_document(entries=[{"id": 5, "status": "planned"}]))
        entry = snap.entries[0]

        assert entry.score == 0
        assert entry.progress == 0
        assert entry.notes == ""
        assert entry.favorite is False
        assert entry.start_date is None
        assert entry.end_date is None
        assert entry.title == ""
        assert entry.image_reference == ""

    def test_missing_metadata_and_timestamp(self):
        document = {"format_version": "2.0", "entries": []}
        snap = codec.parse(json.dumps(document).encode())

        assert snap.created_at is None
        assert snap.metadata == SnapshotMetadata()

    def test_domain_violations_are_left_for_the_importer(self):
        """A bad entry parses; rejecting it is the reconciler's job."""
        snap = codec.parse(_document(entries=[{"id": 1, "status": "watching", "score": 42}]))

        assert snap.entries[0].score == 42

    def test_status_is_normalised(self):
        snap = codec.parse(_document(entries=[{"id": 1, "status": " Completed "}]))

        assert snap.entries[0].status == "completed"

    def test_entry_count_mismatch_uses_actual_count(self, warnings_logged):
        data = _document(
            metadata={"entry_count": 10},
            entries=[{"id": 1, "status": "planned"}, {"id": 2, "status": "planned"}],
        )
        snap = codec.parse(data)

        assert snap.metadata.entry_count == 2
        assert any("claims 10 entries" in m for m in warnings_logged)

    @pytest.mark.parametrize(
        "document",
        [
            {"format_version": "2.0", "entries": [{"id": 1, "status": "planned"}]},
            {
                "format_version": "2.0",
                "metadata": {"device_name": "phone"},
                "entries": [{"id": 1, "status": "planned"}],
            },
        ],
    )
    def test_absent_entry_count_is_not_a_mismatch(self, warnings_logged, document):
        snap = codec.parse(json.dumps(document).encode())

        assert snap.metadata.entry_count == 1
        assert warnings_logged == []

    def test_matching_entry_count_is_silent(self, warnings_logged):
        codec.parse(_document())

        assert warnings_logged == []


class TestLegacyFormat:
    """Format 1.x files written by the earlier desktop app."""

    LEGACY = {
        "version": "1.1",
        "timestamp": "2024-03-05T10:15:30.123456789+01:00",
        "metadata": {
            "app_version": "0.1.0",
            "os": "windows",
            "device_name": "DESKTOP-01",
            "export_type": "full",
            "entry_count": 1,
        },
        "anime_list": [
            {
                "id": 3,
                "anime_id": 1535,
                "status": "completed",
                "score": 9,
                "progress": 37,
                "notes": "",
                "favorite": True,
                "start_date": "2023-02-01",
                "end_date": "2023-04-10",
                "image_url": "https://img.example/1535.jpg",
                "title": "Death Note",
            }
        ],
    }

    def test_legacy_keys_are_mapped(self):
        snap = codec.parse(json.dumps(self.LEGACY).encode())
        entry = snap.entries[0]

        assert snap.format_version == "1.1"
        assert entry.id == 1535  # catalog id, not the old row id
        assert entry.image_reference == "https://img.example/1535.jpg"
        assert entry.favorite is True
        assert snap.metadata.export_scope == "all"
        assert snap.metadata.device_name == "DESKTOP-01"

    def test_nanosecond_timestamp(self):
        snap = codec.parse(json.dumps(self.LEGACY).encode())

        assert snap.created_at is not None
        assert snap.created_at.microsecond == 123456
        assert snap.created_at.utcoffset().total_seconds() == 3600
