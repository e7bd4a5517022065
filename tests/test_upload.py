"""Tests for profile photo validation and upload."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from account_console.edit_session import EditMode
from account_console.errors import FileTooLarge, InvalidFileType, NetworkFailure, UploadFailure
from account_console.gateway import PhotoFile
from account_console.upload import MAX_PHOTO_BYTES, validate_photo


class TestValidatePhoto:
    def test_accepts_image_at_limit(self):
        validate_photo(PhotoFile("a.jpg", "image/jpeg", b"x" * MAX_PHOTO_BYTES))

    def test_rejects_non_image(self):
        with pytest.raises(InvalidFileType):
            validate_photo(PhotoFile("a.pdf", "application/pdf", b"%PDF"))

    def test_rejects_over_limit(self):
        with pytest.raises(FileTooLarge):
            validate_photo(PhotoFile("a.png", "image/png", b"x" * (MAX_PHOTO_BYTES + 1)))


def test_photo_file_from_path(tmp_path):
    path = tmp_path / "avatar.png"
    path.write_bytes(b"\x89PNG data")
    photo = PhotoFile.from_path(path)
    assert photo.filename == "avatar.png"
    assert photo.mime_type == "image/png"
    assert photo.size == len(b"\x89PNG data")


@pytest.mark.asyncio
async def test_upload_success_commits_photo(console, gateway, sink, png_photo):
    await console.load()
    url = await console.upload_photo(png_photo)

    assert url.startswith("data:image/png;base64,")
    assert console.store.snapshot.photo_url == url
    assert not console.photos.in_flight
    record = await gateway.get_profile(console.session)
    assert record["photo"] == url
    assert [(n.title, n.variant) for n in sink.drain()] == [("Photo updated", "success")]


@pytest.mark.asyncio
async def test_too_large_never_contacts_gateway(console, gateway, sink):
    await console.load()
    gateway.upload_photo = AsyncMock()
    big = PhotoFile("big.jpg", "image/jpeg", b"x" * (6 * 1024 * 1024))

    assert await console.upload_photo(big) is None

    gateway.upload_photo.assert_not_awaited()
    assert not console.photos.in_flight
    assert isinstance(console.photos.last_error, FileTooLarge)
    assert sink.drain()[0].title == "File too large"


@pytest.mark.asyncio
async def test_wrong_type_rejected(console, gateway, sink):
    await console.load()
    gateway.upload_photo = AsyncMock()
    assert await console.upload_photo(PhotoFile("notes.txt", "text/plain", b"hi")) is None
    gateway.upload_photo.assert_not_awaited()
    assert isinstance(console.photos.last_error, InvalidFileType)
    assert sink.drain()[0].title == "Invalid file type"


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [UploadFailure("bucket full"), NetworkFailure("down")])
async def test_upload_failure_leaves_photo(console, gateway, sink, png_photo, error):
    await console.load()
    gateway.upload_photo = AsyncMock(side_effect=error)

    assert await console.upload_photo(png_photo) is None

    assert console.store.snapshot.photo_url is None
    assert not console.photos.in_flight
    notes = sink.drain()
    assert notes[0].title == "Upload failed"
    assert "bucket full" not in notes[0].description


@pytest.mark.asyncio
async def test_commit_failure_after_upload_leaves_photo(console, gateway, png_photo):
    await console.load()
    gateway.update_profile = AsyncMock(side_effect=NetworkFailure("down"))
    assert await console.upload_photo(png_photo) is None
    assert console.store.snapshot.photo_url is None
    assert not console.photos.in_flight


@pytest.mark.asyncio
async def test_second_upload_while_in_flight_is_ignored(console, gateway, png_photo):
    await console.load()
    gateway.hold_uploads = True

    first = asyncio.create_task(console.upload_photo(png_photo))
    await gateway.entered.wait()
    assert console.photos.in_flight

    assert await console.upload_photo(png_photo) is None
    assert console.photos.in_flight

    gateway.release.set()
    assert await first is not None
    assert gateway.calls.count("upload_photo") == 1
    assert not console.photos.in_flight


@pytest.mark.asyncio
async def test_upload_and_save_do_not_clobber(console, gateway, png_photo):
    await console.load()
    console.editor.begin_edit()
    console.editor.update_field("bio", "Poetical science")
    gateway.hold_uploads = True

    uploading = asyncio.create_task(console.upload_photo(png_photo))
    await gateway.entered.wait()
    assert await console.editor.save() is True
    gateway.release.set()
    url = await uploading

    assert console.editor.mode is EditMode.VIEWING
    assert console.store.snapshot.bio == "Poetical science"
    assert console.store.snapshot.photo_url == url
