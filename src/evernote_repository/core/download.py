"""Materialize referenced attachments as local files."""

import os
from pathlib import Path

import requests
from loguru import logger

from evernote_repository.config import GETFILE_TIMEOUT
from evernote_repository.core.remote.client import NotesClient
from evernote_repository.errors import DownloadError
from evernote_repository.models.listing import FileReference, MaterializedFile, ReferenceSize
from evernote_repository.strings import get_string

_CHUNK_SIZE = 64 * 1024


class FileMaterializer:
    """Download referenced files.

    A reference holding a share URL is fetched over plain HTTP; otherwise the
    attachment is read from the note store with the current user's token.
    """

    def __init__(
        self,
        client: NotesClient,
        *,
        session: requests.Session | None = None,
        timeout: int = GETFILE_TIMEOUT,
    ) -> None:
        self.client = client
        self.sess = session or requests.Session()
        self.timeout = timeout

    def materialize(self, reference: FileReference, target: Path) -> MaterializedFile:
        """Write the referenced file at ``target``.

        The data lands in a sibling ``.part`` file first, so ``target`` is
        either complete or left untouched.

        Raises:
            DownloadError: The file could not be obtained, whatever the cause.
        """
        partial = target.with_name(f".{target.name}.part")
        try:
            if reference.share_url:
                self._download_share_url(reference.share_url, partial)
            else:
                self._download_resource(reference.remote_id, partial)
            os.replace(partial, target)
        except Exception as exc:
            partial.unlink(missing_ok=True)
            logger.warning("Download of {!r} failed: {}", reference.source, exc)
            raise DownloadError(get_string("cannotdownload")) from exc
        return MaterializedFile(path=target)

    def _download_share_url(self, url: str, target: Path) -> None:
        logger.debug("Downloading share link {!r}", url)
        r = self.sess.get(url, timeout=self.timeout, allow_redirects=True, stream=True)
        try:
            if r.status_code != 200:
                msg = f"Share link answered HTTP {r.status_code}"
                raise DownloadError(msg)
            with open(target, "wb") as f:
                for chunk in r.iter_content(chunk_size=_CHUNK_SIZE):
                    f.write(chunk)
        finally:
            r.close()

    def _download_resource(self, guid: str, target: Path) -> None:
        if not guid:
            msg = "Reference without a resource identifier"
            raise DownloadError(msg)
        logger.debug("Fetching resource {!r} from the note store", guid)
        resource = self.client.get_resource(guid).unwrap()
        if resource.body is None:
            msg = f"Resource {guid!r} came without data"
            raise DownloadError(msg)
        target.write_bytes(resource.body)

    def reference_size(self, reference: FileReference) -> ReferenceSize:
        """Ask the share URL for the size of the referenced file.

        Transport errors are not caught.
        """
        r = self.sess.head(reference.share_url, timeout=self.timeout, allow_redirects=True)
        size: int | None = None
        length = r.headers.get("Content-Length")
        if r.status_code == 200 and length is not None and length.isdigit():
            size = int(length)
        return ReferenceSize(filepath=reference.share_url, filesize=size)
