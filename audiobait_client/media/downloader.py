"""
Handles the low-level streaming of signed file content from the API server to
local storage.
"""

import logging
import os
from pathlib import Path

import aiofiles

from audiobait_client.api.client import TRANSPORT_ERRORS, DeviceAPIClient
from audiobait_client.api.session import Session
from audiobait_client.exceptions import (
    OperationError,
    StorageError,
    is_http_client_error,
    temporary_error,
)

log = logging.getLogger(__name__)

SIGNED_URL_PATH = "api/v1/signedUrl"


class Downloader:
    """Streams file content addressed by a signed token to disk."""

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(self, api_client: DeviceAPIClient):
        self._api_client = api_client

    async def download_signed_file(
        self, session: Session, jwt: str, destination_path: str | os.PathLike
    ) -> int:
        """
        Fetches the content behind a signed token and writes it to a file.

        The request carries no Authorization header; the signed token is the
        only credential. The destination is opened only after a 200 response,
        then overwritten chunk by chunk.

        Returns:
            The number of bytes written.
        """
        destination_path = Path(destination_path)
        http = await self._api_client.http_session()
        try:
            async with http.get(
                session.url(SIGNED_URL_PATH),
                params={"jwt": jwt},
                timeout=self._api_client.download_timeout(),
            ) as response:
                if response.status != 200:
                    raise OperationError(
                        f"bad status: {response.status} {response.reason or ''}".rstrip(),
                        permanent=is_http_client_error(response.status),
                    )
                bytes_written = 0
                try:
                    async with aiofiles.open(destination_path, "wb") as f:
                        async for chunk in response.content.iter_chunked(
                            self.CHUNK_SIZE
                        ):
                            await f.write(chunk)
                            bytes_written += len(chunk)
                except TRANSPORT_ERRORS:
                    raise
                except OSError as e:
                    raise StorageError(
                        f"could not write '{destination_path}': {e}"
                    ) from e
        except TRANSPORT_ERRORS as e:
            log.debug(f"Download of '{destination_path.name}' failed: {e}")
            raise temporary_error(e) from e

        log.debug(f"Wrote {bytes_written} bytes to '{destination_path}'")
        return bytes_written
