"""Unit tests for core/upload.py"""

import asyncio
import json

import httpx
import pytest

from blockpub.core.editor import DocumentEditor
from blockpub.core.upload import (
    ImageUploadSession, UploadClient, UploadError, UploadFile, remove_image, strip_query, upload_image,
    validate_image,
)


ENDPOINT = "http://api.test/api/blog-images/upload"
SIGNED = "https://bucket.test/blog-images/abc.png?X-Signature=xyz&Expires=1"


def _png(size: int = 16) -> UploadFile:
    return UploadFile(filename="photo.png", content_type="image/png", data=b"\x89" * size)


class FakeStorage:
    """Mock upload API plus storage bucket, recording every request."""

    def __init__(self, api_status: int = 200, put_status: int = 200, on_put=None):
        self.requests: list[httpx.Request] = []
        self.api_status = api_status
        self.put_status = put_status
        self.on_put = on_put

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            if self.api_status != 200:
                return httpx.Response(self.api_status, json={"error": "nope"})
            body = json.loads(request.content)
            return httpx.Response(200, json={"uploadURL": SIGNED.replace("abc", body["prefix"] + "-abc")})
        if self.on_put:
            self.on_put()
        return httpx.Response(self.put_status)


def _client(storage: FakeStorage, **kwargs) -> UploadClient:
    return UploadClient(ENDPOINT, transport=httpx.MockTransport(storage), **kwargs)


@pytest.fixture(name="image_editor")
def image_editor_fixture():
    editor = DocumentEditor()
    editor.add_block("header")
    editor.add_block("image")
    return editor


def _image_id(editor: DocumentEditor) -> str:
    return next(b.id for b in editor.blocks if b.type == "image")


# --- validation ---

def test_strip_query():
    assert strip_query(SIGNED) == "https://bucket.test/blog-images/abc.png"
    assert strip_query("https://x.test/a.png") == "https://x.test/a.png"


def test_validate_rejects_non_image():
    with pytest.raises(UploadError) as exc:
        validate_image(UploadFile("notes.pdf", "application/pdf", b"%PDF"))
    assert exc.value.title == "Invalid File"


def test_validate_rejects_oversized():
    with pytest.raises(UploadError) as exc:
        validate_image(_png(size=11), max_bytes=10)
    assert exc.value.title == "File Too Large"


def test_validate_accepts_exact_limit():
    validate_image(_png(size=10), max_bytes=10)


# --- UploadClient ---

@pytest.mark.asyncio
async def test_upload_returns_url_without_query():
    """The stored url is the signed url with its query string removed."""
    storage = FakeStorage()
    url = await _client(storage).upload(_png())
    assert url == "https://bucket.test/blog-images/blog-images-abc.png"
    post, put = storage.requests
    assert json.loads(post.content) == {"contentType": "image/png", "prefix": "blog-images"}
    assert put.method == "PUT"
    assert put.headers["Content-Type"] == "image/png"


@pytest.mark.asyncio
async def test_upload_sends_bearer_token():
    storage = FakeStorage()
    await _client(storage, token="secret").upload(_png())
    assert storage.requests[0].headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_upload_progress_reported():
    storage = FakeStorage()
    seen = []
    await _client(storage).upload(_png(), progress=seen.append)
    assert seen == [50, 100]


@pytest.mark.asyncio
async def test_invalid_file_makes_no_requests():
    """Validation failures never reach the network."""
    storage = FakeStorage()
    with pytest.raises(UploadError):
        await _client(storage, max_bytes=4).upload(_png(size=5))
    assert storage.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("api_status,put_status", [(500, 200), (403, 200), (200, 500)])
async def test_upload_non_2xx_raises(api_status, put_status):
    """A non-2xx response at either step is an upload failure."""
    storage = FakeStorage(api_status=api_status, put_status=put_status)
    with pytest.raises(UploadError) as exc:
        await _client(storage).upload(_png())
    assert exc.value.title == "Upload Failed"


@pytest.mark.asyncio
async def test_upload_missing_upload_url():
    def handler(request):
        return httpx.Response(200, json={"url": "x"})

    client = UploadClient(ENDPOINT, transport=httpx.MockTransport(handler))
    with pytest.raises(UploadError):
        await client.upload(_png())


# --- ImageUploadSession / upload_image ---

@pytest.mark.asyncio
async def test_upload_image_sets_block_url(image_editor):
    notices = []
    session = ImageUploadSession(_client(FakeStorage()), notify=notices.append)
    block_id = _image_id(image_editor)

    assert await upload_image(image_editor, block_id, session, _png())
    assert image_editor.get(block_id).content["url"] == "https://bucket.test/blog-images/blog-images-abc.png"
    assert image_editor.get(block_id).content["alt"] == ""
    assert notices[-1].title == "Upload Successful"
    assert not session.uploading


@pytest.mark.asyncio
async def test_failed_upload_leaves_block_unchanged(image_editor):
    """On failure the user is notified and the block is not touched."""
    notices = []
    session = ImageUploadSession(_client(FakeStorage(put_status=503)), notify=notices.append)
    block_id = _image_id(image_editor)
    before = image_editor.get(block_id)

    assert not await upload_image(image_editor, block_id, session, _png())
    assert image_editor.get(block_id) == before
    assert notices[-1].error
    assert not session.uploading
    assert session.progress == 0


@pytest.mark.asyncio
async def test_invalid_file_notice(image_editor):
    notices = []
    session = ImageUploadSession(_client(FakeStorage()), notify=notices.append)
    await upload_image(image_editor, _image_id(image_editor), session, UploadFile("a.txt", "text/plain", b"x"))
    assert notices[-1].title == "Invalid File"


@pytest.mark.asyncio
async def test_block_deleted_during_upload_stays_deleted(image_editor):
    """A url arriving for a removed block does not bring it back."""
    block_id = _image_id(image_editor)
    storage = FakeStorage(on_put=lambda: image_editor.delete(block_id))
    session = ImageUploadSession(_client(storage))

    assert not await upload_image(image_editor, block_id, session, _png())
    assert image_editor.get(block_id) is None
    assert [b.order for b in image_editor.blocks] == [0]


@pytest.mark.asyncio
async def test_concurrent_uploads_are_independent():
    """Two image blocks uploading at once each receive their own url."""
    editor = DocumentEditor()
    first = editor.add_block("image")
    second = editor.add_block("image")

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)
        if request.method == "POST":
            prefix = json.loads(request.content)["prefix"]
            return httpx.Response(200, json={"uploadURL": f"https://bucket.test/{prefix}/img.png?sig=1"})
        return httpx.Response(200)

    transport = httpx.MockTransport(handler)
    a = ImageUploadSession(UploadClient(ENDPOINT, prefix="a", transport=transport))
    b = ImageUploadSession(UploadClient(ENDPOINT, prefix="b", transport=transport))

    results = await asyncio.gather(
        upload_image(editor, first.id, a, _png()),
        upload_image(editor, second.id, b, _png()),
    )
    assert results == [True, True]
    assert editor.get(first.id).content["url"] == "https://bucket.test/a/img.png"
    assert editor.get(second.id).content["url"] == "https://bucket.test/b/img.png"


def test_remove_image_clears_url(image_editor):
    block_id = _image_id(image_editor)
    image_editor.patch_content(block_id, {"url": "https://x.test/a.png", "alt": "A"})
    assert remove_image(image_editor, block_id)
    assert image_editor.get(block_id).content == {"url": "", "alt": "A"}
