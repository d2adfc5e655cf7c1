"""
Handles device registration and authentication with the API server.
"""

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from audiobait_client.exceptions import AuthenticationError
from audiobait_client.models.schedule import TokenResponse

from .client import TRANSPORT_ERRORS
from .session import DeviceIdentity, Session

if TYPE_CHECKING:
    from .client import DeviceAPIClient

log = logging.getLogger(__name__)


class DeviceAuthenticator:
    """
    Manages the authentication flow for a device.

    Authentication is single-shot: every failure, including transport
    failures, is permanent. Retrying is left to the caller.
    """

    def __init__(self, api_client: "DeviceAPIClient"):
        """
        Initializes the authenticator.

        Args:
            api_client: A reference to the DeviceAPIClient used for requests.
        """
        self._api_client = api_client

    async def authenticate(self, identity: DeviceIdentity) -> Session:
        """
        Authenticates a device and returns a new session holding its token.

        A session created this way reports ``just_registered`` so callers know
        to persist the device credentials.

        Raises:
            AuthenticationError: If no password is set, the request or response
                decoding fails, or the server rejects the credentials.
        """
        session = Session(identity=identity)
        await self._obtain_token(session)
        return session

    async def refresh(self, session: Session) -> None:
        """Obtains a new token for an existing session, replacing the old one."""
        await self._obtain_token(session)

    async def _obtain_token(self, session: Session) -> None:
        identity = session.identity
        if not identity.password:
            raise AuthenticationError("no password set")

        log.info(f"Authenticating device: {identity.device_name}")
        try:
            body = await self._api_client.authenticate_device(identity)
        except TRANSPORT_ERRORS as e:
            raise AuthenticationError(f"authentication request failed: {e}") from e
        except ValueError as e:
            raise AuthenticationError(f"decode: {e}") from e

        try:
            response = TokenResponse.model_validate(body)
        except ValidationError as e:
            raise AuthenticationError(f"decode: {e}") from e

        if not response.success:
            log.debug(f"Registration failed: {response.message()}")
            raise AuthenticationError(response.message())
        if not response.token:
            raise AuthenticationError("server issued an empty token")

        session.mark_authenticated(response.token)
        log.info(f"Device '{identity.device_name}' authenticated.")


async def authenticate(
    api_client: "DeviceAPIClient",
    server_url: str,
    group: str,
    device_name: str,
    password: str,
) -> Session:
    """Convenience wrapper building the identity and authenticating it."""
    identity = DeviceIdentity(
        server_url=server_url, group=group, device_name=device_name, password=password
    )
    return await DeviceAuthenticator(api_client).authenticate(identity)
