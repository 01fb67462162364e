import pytest
import requests

from sticker.cutout import REMOVE_BG_URL, RemoveBgClient
from sticker.errors import ServiceError

from conftest import FakeResponse, FakeSession, png_bytes, red_square


def test_remove_background_posts_image_and_returns_rgba():
    cutout = red_square(16, (4, 4, 12, 12))
    session = FakeSession(FakeResponse(200, content=png_bytes(cutout)))
    client = RemoveBgClient("key-123", session=session)

    result = client.remove_background(b"raw-image", filename="cat.jpg")

    assert result.mode == "RGBA"
    assert result.tobytes() == cutout.tobytes()
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", REMOVE_BG_URL)
    assert kwargs["headers"] == {"X-Api-Key": "key-123"}
    assert kwargs["files"] == {"image_file": ("cat.jpg", b"raw-image")}
    assert kwargs["data"] == {"size": "auto"}


def test_missing_key_fails_without_calling_service():
    session = FakeSession(FakeResponse(200))
    with pytest.raises(ServiceError) as info:
        RemoveBgClient(None, session=session).remove_background(b"raw")
    assert info.value.stage == "cutout"
    assert session.calls == []


def test_http_error_is_a_service_error():
    session = FakeSession(FakeResponse(402, text="Insufficient credits"))
    with pytest.raises(ServiceError, match="402"):
        RemoveBgClient("key", session=session).remove_background(b"raw")


def test_transport_error_is_a_service_error():
    session = FakeSession(error=requests.ConnectionError("offline"))
    with pytest.raises(ServiceError, match="offline"):
        RemoveBgClient("key", session=session).remove_background(b"raw")


def test_unreadable_body_is_a_service_error():
    session = FakeSession(FakeResponse(200, content=b"<html>oops</html>"))
    with pytest.raises(ServiceError):
        RemoveBgClient("key", session=session).remove_background(b"raw")
