from __future__ import annotations

import json

import pytest

from transcript_service.errors import ResourceNotFoundError
from transcript_service.resources import (
    decode_cursor,
    encode_cursor,
    list_resources,
    read_resource,
    resource_template,
    resource_uri,
)
from transcript_service.schemas import Transcript, TranscriptMetadata, TranscriptSegment
from transcript_service.store import TranscriptStore


def _save(store: TranscriptStore, video_id: str, title: str | None = "Title") -> None:
    store.write(
        video_id,
        Transcript(
            video_id=video_id,
            title=title,
            uploader="Uploader",
            duration=65,
            url=f"https://youtu.be/{video_id}",
            transcript=[TranscriptSegment(start=0, duration=1, text="hi")],
            metadata=TranscriptMetadata(
                transcription_date="2026-01-01T00:00:00+00:00",
                language="en",
                confidence=0.95,
            ),
        ),
    )


def test_listing_is_paged_and_sorted(store: TranscriptStore) -> None:
    for index in range(12):
        _save(store, f"vid{index:02d}")

    first = list_resources(store, page_size=10)
    assert len(first.resources) == 10
    assert first.next_cursor == encode_cursor(10)

    second = list_resources(store, cursor=first.next_cursor, page_size=10)
    assert len(second.resources) == 2
    assert second.next_cursor is None
    assert second.resources[-1].uri == resource_uri(store, "vid11")


def test_listing_reflects_store_without_caching(store: TranscriptStore) -> None:
    assert list_resources(store).resources == []
    _save(store, "abc123")
    assert [resource.name for resource in list_resources(store).resources] == ["Title - Transcript"]


def test_listing_uses_display_fallbacks_and_skips_broken_files(store: TranscriptStore) -> None:
    _save(store, "abc123", title=None)
    (store.directory / "broken.json").write_text("{", encoding="utf-8")

    resources = list_resources(store).resources

    assert len(resources) == 1
    assert resources[0].name == "Unknown Video - Transcript"
    assert "Uploader (abc123)" in resources[0].description
    assert "00:01:05.000" in resources[0].description


@pytest.mark.parametrize("cursor", [None, "", "%%%", encode_cursor(-5)])
def test_malformed_cursor_starts_from_beginning(cursor) -> None:
    assert decode_cursor(cursor) == 0


def test_read_resource_returns_full_json(store: TranscriptStore) -> None:
    _save(store, "abc123")
    uri = resource_uri(store, "abc123")

    response = read_resource(store, uri)

    assert response.contents[0].uri == uri
    assert json.loads(response.contents[0].text)["video_id"] == "abc123"


@pytest.mark.parametrize(
    "uri",
    ["https://example.com/abc123.json", "file:///etc/passwd", "file:///tmp/abc123.txt"],
)
def test_read_resource_rejects_uris_outside_the_store(store: TranscriptStore, uri: str) -> None:
    with pytest.raises(ResourceNotFoundError):
        read_resource(store, uri)


def test_read_resource_for_missing_file(store: TranscriptStore) -> None:
    store.directory.mkdir(parents=True)
    with pytest.raises(ResourceNotFoundError):
        read_resource(store, (store.directory / "gone.json").resolve().as_uri())


def test_template_points_at_store_directory(store: TranscriptStore) -> None:
    template = resource_template(store)
    assert template.uri_template.endswith("/{video_id}.json")
    assert "video_id" in template.json_schema["properties"]
