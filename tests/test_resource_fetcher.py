"""Tests for schedule retrieval and two-step file fetching."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, Mock

from fake_api import FakeDeviceAPI

from audiobait_client.api.client import DeviceAPIClient
from audiobait_client.api.session import DeviceIdentity, Session
from audiobait_client.core.resource_fetcher import ResourceFetcher
from audiobait_client.exceptions import (
    DecodeError,
    NotAuthenticatedError,
    OperationError,
    StorageError,
    is_permanent_error,
)
from audiobait_client.models.schedule import Schedule


class TestResourceFetcher(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.api = FakeDeviceAPI(files={5: b"five", 7: b"seven" * 1000, 1: b"one"})
        server_url = await self.api.start()
        self.client = DeviceAPIClient(request_timeout=5)
        self.fetcher = ResourceFetcher(self.client)
        self.session = Session.with_token(
            DeviceIdentity(server_url, "birds", "lure-01"), "session-token"
        )
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    async def asyncTearDown(self) -> None:
        await self.client.close()
        await self.api.close()
        self._tmp.cleanup()

    async def test_get_schedule_decodes_response(self) -> None:
        schedule = await self.fetcher.get_schedule(self.session)

        self.assertEqual(schedule.all_sound_file_ids, [1, 2])
        self.assertEqual(schedule.combos, [])
        self.assertEqual(schedule.play_nights, 3)
        self.assertEqual(schedule.description, "x")

        (request,) = self.api.requests_to("/api/v1/schedules")
        self.assertEqual(request.headers["Authorization"], "session-token")

    async def test_get_schedule_with_combos(self) -> None:
        self.api.schedule_body = {
            "schedule": {
                "combos": [
                    {
                        "from": "18:00",
                        "until": "06:00",
                        "waits": [0, 30],
                        "sounds": ["5", "7"],
                        "volumes": [8, 10],
                    }
                ],
                "allSounds": [5, 7],
            }
        }

        schedule = await self.fetcher.get_schedule(self.session)

        (combo,) = schedule.combos
        self.assertEqual(combo.from_, "18:00")
        self.assertEqual(combo.until, "06:00")
        self.assertEqual(combo.sounds, ["5", "7"])
        self.assertEqual(schedule.play_nights, 0)
        self.assertEqual(schedule.description, "")

    async def test_get_schedule_malformed_body(self) -> None:
        self.api.schedule_body = "this is not json"

        with self.assertRaises(DecodeError):
            await self.fetcher.get_schedule(self.session)

    async def test_get_schedule_null_fields_are_empty(self) -> None:
        self.api.schedule_body = {
            "schedule": {
                "combos": None,
                "allSounds": None,
                "playNights": None,
                "description": None,
            }
        }

        schedule = await self.fetcher.get_schedule(self.session)

        self.assertEqual(schedule, Schedule())

    async def test_get_schedule_rejected_token_is_permanent(self) -> None:
        self.api.token = "another-token"

        with self.assertRaises(OperationError) as ctx:
            await self.fetcher.get_schedule(self.session)

        self.assertTrue(ctx.exception.permanent)
        self.assertIn("401", str(ctx.exception))

    async def test_get_schedule_without_token_makes_no_request(self) -> None:
        session = Session(self.session.identity)

        with self.assertRaises(NotAuthenticatedError):
            await self.fetcher.get_schedule(session)
        self.assertEqual(self.api.requests, [])

    async def test_get_schedule_transport_failure_is_temporary(self) -> None:
        await self.api.close()

        with self.assertRaises(OperationError) as ctx:
            await self.fetcher.get_schedule(self.session)

        self.assertFalse(is_permanent_error(ctx.exception))

    async def test_get_schedule_timeout_is_temporary(self) -> None:
        self.api.delay = 1.0
        client = DeviceAPIClient(request_timeout=0.1)
        try:
            with self.assertRaises(OperationError) as ctx:
                await ResourceFetcher(client).get_schedule(self.session)
        finally:
            await client.close()

        self.assertFalse(ctx.exception.permanent)

    async def test_two_step_fetch(self) -> None:
        jwt = await self.fetcher.fetch_file_token(self.session, 5)
        self.assertEqual(jwt, "signed.5")

        size = await self.fetcher.download_signed_file(
            self.session, jwt, self.tmp / "five"
        )

        self.assertEqual(size, 4)
        self.assertEqual((self.tmp / "five").read_bytes(), b"five")
        (signed,) = self.api.requests_to("/api/v1/signedUrl")
        self.assertEqual(signed.query, {"jwt": "signed.5"})
        self.assertNotIn("Authorization", signed.headers)

    async def test_fetch_file_bad_signed_status(self) -> None:
        self.api.signed_status = 503
        destination = self.tmp / "5"

        with self.assertRaises(OperationError) as ctx:
            await self.fetcher.fetch_file(self.session, 5, destination)

        self.assertTrue(str(ctx.exception).startswith("bad status: 503"))
        self.assertFalse(ctx.exception.permanent)
        self.assertFalse(destination.exists())

    async def test_fetch_file_signed_not_found_is_permanent(self) -> None:
        self.api.signed_status = 404

        with self.assertRaises(OperationError) as ctx:
            await self.fetcher.fetch_file(self.session, 5, self.tmp / "5")

        self.assertIn("Not Found", str(ctx.exception))
        self.assertTrue(ctx.exception.permanent)

    async def test_fetch_file_dropped_connection_is_temporary(self) -> None:
        self.api.signed_truncate = True

        with self.assertRaises(OperationError) as ctx:
            await self.fetcher.fetch_file(self.session, 7, self.tmp / "7")

        self.assertFalse(is_permanent_error(ctx.exception))
        self.assertNotIsInstance(ctx.exception, StorageError)

    async def test_fetch_file_stalled_download_is_temporary(self) -> None:
        self.api.signed_stall = 1.0
        client = DeviceAPIClient(request_timeout=0.1)
        try:
            with self.assertRaises(OperationError) as ctx:
                await ResourceFetcher(client).fetch_file(self.session, 7, self.tmp / "7")
        finally:
            await client.close()

        self.assertFalse(ctx.exception.permanent)
        self.assertNotIsInstance(ctx.exception, StorageError)

    async def test_fetch_file_token_unknown_file_is_permanent(self) -> None:
        with self.assertRaises(OperationError) as ctx:
            await self.fetcher.fetch_file_token(self.session, 99)

        self.assertTrue(ctx.exception.permanent)
        self.assertEqual(self.api.requests_to("/api/v1/signedUrl"), [])

    async def test_fetch_file_token_missing_jwt(self) -> None:
        client = Mock(spec=DeviceAPIClient)
        client.get_json = AsyncMock(return_value={"name": "no token here"})

        with self.assertRaises(DecodeError):
            await ResourceFetcher(client).fetch_file_token(self.session, 5)

        client.get_json.assert_awaited_once_with(self.session, "api/v1/files/5")

    async def test_fetch_all_includes_duplicates(self) -> None:
        schedule = Schedule(all_sounds=[5, 7, 5])
        destination = self.tmp / "nested" / "files"

        paths = await self.fetcher.fetch_all_schedule_files(
            self.session, schedule, destination
        )

        self.assertEqual(paths, [destination / "5", destination / "7", destination / "5"])
        self.assertEqual(len(self.api.requests_to("/api/v1/files/")), 3)
        self.assertEqual(len(self.api.requests_to("/api/v1/signedUrl")), 3)
        self.assertEqual(sorted(p.name for p in destination.iterdir()), ["5", "7"])
        self.assertEqual((destination / "7").read_bytes(), b"seven" * 1000)

    async def test_fetch_all_fails_fast_and_keeps_earlier_files(self) -> None:
        self.api.file_status[7] = 500
        schedule = Schedule(all_sounds=[5, 7, 1])

        with self.assertRaises(OperationError) as ctx:
            await self.fetcher.fetch_all_schedule_files(self.session, schedule, self.tmp)

        self.assertFalse(ctx.exception.permanent)
        self.assertTrue((self.tmp / "5").exists())
        self.assertFalse((self.tmp / "1").exists())
        self.assertEqual(
            [r.path for r in self.api.requests_to("/api/v1/files/")],
            ["/api/v1/files/5", "/api/v1/files/7"],
        )

    async def test_fetch_all_unwritable_destination(self) -> None:
        blocker = self.tmp / "blocker"
        blocker.write_bytes(b"")

        with self.assertRaises(StorageError):
            await self.fetcher.fetch_all_schedule_files(
                self.session, Schedule(all_sounds=[5]), blocker / "files"
            )
        self.assertEqual(self.api.requests, [])
