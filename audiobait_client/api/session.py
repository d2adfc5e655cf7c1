"""
Device identity and session state.

The identity of a device is immutable; the access token lives in a separate
mutable cell that only authentication writes to. A session ties the two
together and is passed explicitly into every API operation.
"""

from dataclasses import dataclass, field

from audiobait_client.exceptions import NotAuthenticatedError


@dataclass(frozen=True)
class DeviceIdentity:
    """Who the device is and where its API server lives."""

    server_url: str
    group: str
    device_name: str
    password: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "server_url", self.server_url.rstrip("/"))

    def url(self, path: str) -> str:
        return f"{self.server_url}/{path.lstrip('/')}"


class TokenCell:
    """Holds the session access token. Empty until authentication succeeds."""

    def __init__(self, value: str = ""):
        self._value = value

    def __bool__(self) -> bool:
        return bool(self._value)

    def __repr__(self) -> str:
        return f"TokenCell(set={bool(self)})"

    def get(self) -> str:
        return self._value

    def set(self, value: str) -> None:
        self._value = value

    def require(self) -> str:
        """Returns the token, failing permanently if none has been obtained."""
        if not self._value:
            raise NotAuthenticatedError()
        return self._value


@dataclass
class Session:
    """
    An authenticated (or authenticating) device session.

    A session is not internally synchronised; callers sharing one across
    concurrent tasks must serialise authentication themselves.
    """

    identity: DeviceIdentity
    token: TokenCell = field(default_factory=TokenCell)
    _just_registered: bool = field(default=False, repr=False)

    @classmethod
    def with_token(cls, identity: DeviceIdentity, token: str) -> "Session":
        """Builds a session from a token that was obtained out-of-band."""
        return cls(identity=identity, token=TokenCell(token))

    @property
    def server_url(self) -> str:
        return self.identity.server_url

    @property
    def group(self) -> str:
        return self.identity.group

    @property
    def device_name(self) -> str:
        return self.identity.device_name

    @property
    def password(self) -> str:
        return self.identity.password

    @property
    def just_registered(self) -> bool:
        """True when this session was produced by a fresh registration."""
        return self._just_registered

    @property
    def access_token(self) -> str:
        return self.token.get()

    def url(self, path: str) -> str:
        return self.identity.url(path)

    def authorization_headers(self) -> dict[str, str]:
        """Headers for an authenticated call. Requires a non-empty token."""
        return {"Authorization": self.token.require()}

    def mark_authenticated(self, token: str) -> None:
        """Stores a freshly issued token. Only authentication calls this."""
        self.token.set(token)
        self._just_registered = True
