"""Image upload collaborator: signed-URL upload over HTTP plus per-block upload sessions"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
import structlog

from blockpub.core.editor import DocumentEditor


logger = structlog.get_logger()

MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class UploadError(RuntimeError):
    """An image could not be uploaded; carries a short user-facing title."""

    def __init__(self, title: str, message: str):
        super().__init__(message)
        self.title = title


@dataclass
class UploadFile:
    filename:     str
    content_type: str
    data:         bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class Notice:
    """Transient user notification (toast)."""
    title:       str
    description: str
    error:       bool = False


def validate_image(file: UploadFile, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """Raise UploadError unless file is an image no larger than max_bytes."""
    if not file.content_type.startswith("image/"):
        raise UploadError("Invalid File", "Please select an image file (PNG, JPG, GIF, etc.)")
    if file.size > max_bytes:
        raise UploadError("File Too Large", f"Please select an image smaller than {max_bytes // (1024 * 1024)}MB")


def strip_query(url: str) -> str:
    """The retrievable object URL is the signed upload URL without its query string."""
    return url.split("?", 1)[0]


class UploadClient:
    """Two-step upload: ask the API for a signed target, then PUT the bytes to it."""

    def __init__(
        self,
        endpoint: str,
        prefix: str = "blog-images",
        token: Optional[str] = None,
        timeout: float = 30.0,
        max_bytes: int = MAX_UPLOAD_BYTES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ):
        self.endpoint = endpoint
        self.prefix = prefix
        self.token = token
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def request_upload_target(self, client: httpx.AsyncClient, content_type: str, prefix: str) -> str:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = await client.post(
                self.endpoint, json={"contentType": content_type, "prefix": prefix}, headers=headers,
            )
            response.raise_for_status()
            upload_url = response.json()["uploadURL"]
        except httpx.HTTPStatusError as e:
            raise UploadError("Upload Failed", f"Failed to get upload URL ({e.response.status_code})") from e
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise UploadError("Upload Failed", f"Failed to get upload URL: {e}") from e
        return upload_url

    async def put_file(self, client: httpx.AsyncClient, upload_url: str, file: UploadFile) -> None:
        try:
            response = await client.put(upload_url, content=file.data, headers={"Content-Type": file.content_type})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UploadError("Upload Failed", f"Upload failed ({e.response.status_code})") from e
        except httpx.HTTPError as e:
            raise UploadError("Upload Failed", f"Upload failed: {e}") from e

    async def upload(self, file: UploadFile, progress: Callable[[int], Any] | None = None) -> str:
        """Validate and upload file; return its stored URL. Raises UploadError on any failure."""
        validate_image(file, self.max_bytes)
        async with self._client() as client:
            upload_url = await self.request_upload_target(client, file.content_type, self.prefix)
            if progress:
                progress(50)
            await self.put_file(client, upload_url, file)
        if progress:
            progress(100)
        return strip_query(upload_url)


class ImageUploadSession:
    """Upload state for one image block's editing session.

    Sessions are independent: two blocks uploading at once each hold their
    own flag and progress. progress is cosmetic and never persisted.
    """

    def __init__(self, client: UploadClient, notify: Callable[[Notice], Any] | None = None):
        self.client = client
        self.notify = notify
        self.uploading = False
        self.progress = 0

    def _set_progress(self, value: int) -> None:
        self.progress = value

    def _notice(self, notice: Notice) -> None:
        if self.notify:
            self.notify(notice)

    async def run(self, file: UploadFile, on_uploaded: Callable[[str], Any]) -> str | None:
        """Upload file and hand the URL to on_uploaded; failures are reported, not raised."""
        self.uploading = True
        self.progress = 0
        try:
            url = await self.client.upload(file, progress=self._set_progress)
        except UploadError as e:
            logger.warning("upload_failed", filename=file.filename, reason=str(e))
            self._notice(Notice(e.title, str(e), error=True))
            return None
        finally:
            self.uploading = False
            self.progress = 0

        logger.info("upload_succeeded", filename=file.filename, url=url)
        self._notice(Notice("Upload Successful", "Your image has been uploaded successfully"))
        on_uploaded(url)
        return url


async def upload_image(
    editor: DocumentEditor,
    block_id: str,
    session: ImageUploadSession,
    file: UploadFile,
    ) -> bool:
    """Upload into an image block's url; a block removed meanwhile is left absent."""
    applied = []
    await session.run(file, lambda url: applied.append(editor.patch_content(block_id, {"url": url})))
    return bool(applied and applied[0])


def remove_image(editor: DocumentEditor, block_id: str) -> bool:
    return editor.patch_content(block_id, {"url": ""})
