"""Tests for media uploads to Cloudinary."""

from unittest.mock import MagicMock

import pytest

from social import uploads

SECURE_URL = "https://res.cloudinary.com/demo/image/upload/v1/posts/cat.png"


def test_cropped_url():
    assert uploads.cropped_url(SECURE_URL) == (
        "https://res.cloudinary.com/demo/image/upload/c_fill,g_auto,w_600,h_600/v1/posts/cat.png"
    )


def test_upload_files(settings, monkeypatch):
    settings.CLOUDINARY_CLOUD_NAME = "demo"
    upload = MagicMock(return_value={"secure_url": SECURE_URL})
    monkeypatch.setattr(uploads.cloudinary.uploader, "upload", upload)
    monkeypatch.setattr(uploads.cloudinary, "config", MagicMock())

    results = uploads.upload_files([MagicMock(name="cat.png")])

    assert results == [{"original": SECURE_URL, "cropped": uploads.cropped_url(SECURE_URL)}]
    assert upload.call_args.kwargs == {"folder": settings.CLOUDINARY_UPLOAD_FOLDER, "resource_type": "auto"}
    uploads.cloudinary.config.assert_called_once()


def test_upload_without_secure_url_fails(monkeypatch):
    monkeypatch.setattr(uploads.cloudinary.uploader, "upload", MagicMock(return_value={}))
    monkeypatch.setattr(uploads.cloudinary, "config", MagicMock())

    with pytest.raises(ValueError):
        uploads.upload_files([MagicMock()])
