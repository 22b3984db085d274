import os

import pytest

from helpdesk.backend.core.errors import UploadPolicyViolated
from helpdesk.backend.services import upload_service
from helpdesk.shared.schemas import Failure, UploadMetadata, generate_id


class _EndlessStream:
    """Поток, который никогда не кончается и считает прочитанные байты."""

    def __init__(self):
        self.consumed = 0

    def read(self, size=-1):
        chunk = b"x" * size
        self.consumed += len(chunk)
        return chunk


def _initiate(client, filename="notes.txt", content_type="text/plain", size=5):
    return client.initiate_upload(UploadMetadata(filename=filename, content_type=content_type, size=size))


def test_upload_round_trip(make_user):
    client, _ = make_user()
    upload = _initiate(client).unwrap()
    assert upload.url == f"/api/upload/{upload.id}/content"
    assert upload.fields == {}

    client.send_upload_content(upload, "notes.txt", b"hello", "text/plain").unwrap()
    client.finalize_upload(upload.id).unwrap()
    assert client.download_upload(upload.id).unwrap() == b"hello"

    again = client.finalize_upload(upload.id)
    assert again.payload.underlying_error == "AlreadyFinalized"


def test_policy_violations_are_reported(make_user):
    client, _ = make_user()
    bad_name = _initiate(client, filename="../../etc/passwd")
    assert isinstance(bad_name, Failure)
    assert bad_name.payload.underlying_error == "PolicyViolated"
    assert "InvalidFilename" in bad_name.payload.report

    too_big = _initiate(client, filename="scan.pdf", content_type="application/pdf", size=10**9)
    assert "FileTooLarge" in too_big.payload.report

    wrong_type = _initiate(client, filename="tool.exe", content_type="application/x-msdownload")
    assert "FileExtensionNotAllowed" in wrong_type.payload.report
    assert "ContentTypeNotAllowed" in wrong_type.payload.report


def test_only_owner_can_finalize(make_user):
    owner, _ = make_user()
    stranger, _ = make_user()
    upload = _initiate(owner).unwrap()

    result = stranger.finalize_upload(upload.id)
    assert isinstance(result, Failure)
    assert result.payload.underlying_error == "Forbidden"


def test_finalize_requires_content(make_user):
    client, _ = make_user()
    upload = _initiate(client).unwrap()
    assert client.finalize_upload(upload.id).payload.underlying_error == "ContentMissing"

    oversized = client.send_upload_content(upload, "notes.txt", b"more than five bytes", "text/plain")
    assert oversized.payload.underlying_error == "PolicyViolated"


def test_unknown_uploads(make_user):
    client, _ = make_user()
    assert client.finalize_upload(generate_id()).payload.underlying_error == "NotInitiated"
    missing = client.download_upload(generate_id())
    assert isinstance(missing, Failure)
    assert missing.payload.underlying_error == "NotFound"


def test_oversized_content_stops_after_first_chunk(make_user, app, settings):
    client, user_id = make_user()
    upload = _initiate(client).unwrap()
    stream = _EndlessStream()

    with app.state.database.get_db() as db:
        with pytest.raises(UploadPolicyViolated):
            upload_service.store_content(db, settings, user_id, upload.id, stream)

    assert stream.consumed <= upload_service.CHUNK_SIZE
    assert not os.path.exists(os.path.join(settings.UPLOAD_DIR, user_id, upload.id, "notes.txt"))
    assert client.finalize_upload(upload.id).payload.underlying_error == "ContentMissing"


def test_expired_upload_is_dropped(make_user, settings, monkeypatch):
    client, _ = make_user()
    monkeypatch.setattr(settings, "UPLOAD_EXPIRATION_SECONDS", -1)
    upload = _initiate(client).unwrap()

    late = client.send_upload_content(upload, "notes.txt", b"hello", "text/plain")
    assert isinstance(late, Failure)
    assert late.payload.underlying_error == "AlreadyDropped"
    assert client.finalize_upload(upload.id).payload.underlying_error == "AlreadyDropped"
