from __future__ import annotations

import io
from datetime import datetime

import pytest

from src.credilocker.credilocker.storage.local_storage import LocalFileStorage
from src.credilocker.credilocker.storage.service import UploadService


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path, secret_key="test-secret")


def test_upload_returns_public_url(storage):
    svc = UploadService(storage)

    url = svc.upload(
        folder="cep/pictures",
        owner="24BIT001",
        filename="beach cleanup.jpg",
        stream=io.BytesIO(b"jpg"),
        now=datetime(2026, 3, 1, 9, 0),
    )

    assert url.startswith("/storage/v1/object/public/student-submissions/cep/pictures/24BIT001_")
    assert url.endswith("_beach_cleanup.jpg")


def test_preview_resolves_own_bucket_to_signed_url(storage):
    svc = UploadService(storage, signed_url_ttl=60)
    url = svc.upload(folder="f", owner="u", filename="a.png", stream=io.BytesIO(b"x"))

    preview = svc.preview("Picture", url)

    assert preview.url.startswith("/storage/v1/object/sign/student-submissions/f/")
    assert "token=" in preview.url
    assert preview.kind == "image"


def test_preview_falls_back_to_cleaned_href(storage):
    preview = UploadService(storage).preview("Letter", " @https://files.example.com/letter.pdf")

    assert preview.url == "https://files.example.com/letter.pdf"
    assert preview.kind == "document"


def test_remove_quietly_logs_instead_of_raising(storage, caplog):
    svc = UploadService(storage)

    svc.remove_quietly("https://elsewhere.example.com/x.pdf")

    assert "Skipping storage cleanup" in caplog.text


def test_remove_quietly_deletes_the_object(storage):
    svc = UploadService(storage)
    url = svc.upload(folder="f", owner="u", filename="a.pdf", stream=io.BytesIO(b"x"))
    path = storage.path_from_public_url(url)

    svc.remove_quietly(url)

    assert not storage.local_path(path).exists()
