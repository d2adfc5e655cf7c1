"""
Resolves the device schedule and the audio files it references.

A file is fetched in two explicit steps: an authenticated metadata lookup
yields a short-lived signed token, and that token is then presented to the
signed content endpoint.
"""

import asyncio
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from audiobait_client.api.client import DeviceAPIClient
from audiobait_client.api.session import Session
from audiobait_client.exceptions import DecodeError, StorageError
from audiobait_client.media.downloader import Downloader
from audiobait_client.models.schedule import (
    FileTokenResponse,
    Schedule,
    ScheduleResponse,
)

log = logging.getLogger(__name__)

SCHEDULES_PATH = "api/v1/schedules"
FILES_PATH = "api/v1/files"


class ResourceFetcher:
    """Fetches schedules and schedule files for an authenticated session."""

    def __init__(
        self, api_client: DeviceAPIClient, downloader: Downloader | None = None
    ):
        self._api_client = api_client
        self._downloader = downloader or Downloader(api_client)

    async def get_schedule(self, session: Session) -> Schedule:
        """Fetches and decodes the current audio schedule."""
        log.info("Getting new schedule")
        body = await self._api_client.get_json(session, SCHEDULES_PATH)
        try:
            return ScheduleResponse.model_validate(body).schedule
        except ValidationError as e:
            raise DecodeError(f"decode schedule: {e}") from e

    async def fetch_file_token(self, session: Session, file_id: int) -> str:
        """Step one: looks up the signed access token for a file."""
        body = await self._api_client.get_json(session, f"{FILES_PATH}/{file_id}")
        try:
            return FileTokenResponse.model_validate(body).jwt
        except ValidationError as e:
            raise DecodeError(f"decode file {file_id}: {e}") from e

    async def download_signed_file(
        self, session: Session, jwt: str, destination: str | os.PathLike
    ) -> int:
        """Step two: streams the content behind a signed token to disk."""
        return await self._downloader.download_signed_file(session, jwt, destination)

    async def fetch_file(
        self, session: Session, file_id: int, destination: str | os.PathLike
    ) -> Path:
        """Fetches one file by ID and writes it to ``destination``."""
        jwt = await self.fetch_file_token(session, file_id)
        size = await self.download_signed_file(session, jwt, destination)
        log.debug(f"Fetched file {file_id} ({size} bytes)")
        return Path(destination)

    async def fetch_all_schedule_files(
        self,
        session: Session,
        schedule: Schedule,
        destination_dir: str | os.PathLike,
    ) -> list[Path]:
        """
        Fetches every file the schedule references into ``destination_dir``.

        Files are saved as ``<destination_dir>/<file_id>`` in schedule order.
        Duplicate IDs are fetched again. The first failure stops the run and
        files already written are left in place.
        """
        destination_dir = Path(destination_dir)
        try:
            await asyncio.to_thread(destination_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"could not create '{destination_dir}': {e}") from e

        written = []
        for file_id in schedule.all_sound_file_ids:
            written.append(
                await self.fetch_file(session, file_id, destination_dir / str(file_id))
            )
        log.info(f"Fetched {len(written)} schedule files into '{destination_dir}'")
        return written
