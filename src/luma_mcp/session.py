"""Per-server session: the active calendar and its open API clients"""

import logging
from collections.abc import Callable

from .client import LumaClient
from .config import Config, config
from .errors import no_calendars_error, unknown_profile_error
from .models import CredentialProfile
from .profiles import CredentialStore

logger = logging.getLogger(__name__)

ClientFactory = Callable[[CredentialProfile], LumaClient]


class LumaSession:
    """
    Explicit context handed to the tool dispatcher.

    The active selection lives only in memory; the persisted default is owned by
    the credential store.
    """

    def __init__(self, store: CredentialStore, settings: Config | None = None, client_factory: ClientFactory | None = None):
        self.store = store
        self.settings = settings or config
        self._client_factory = client_factory or self._create_client
        self._active_name: str | None = None
        self._clients: dict[str, LumaClient] = {}

    @classmethod
    def from_config(cls, settings: Config | None = None) -> "LumaSession":
        settings = settings or config
        return cls(CredentialStore.load(settings.calendars_file), settings)

    def _create_client(self, profile: CredentialProfile) -> LumaClient:
        return LumaClient(
            profile.api_key,
            base_url=self.settings.api_base_url,
            public_api_base_url=self.settings.public_api_base_url,
            timeout=self.settings.request_timeout,
            max_pages=self.settings.max_pages,
        )

    @property
    def active_name(self) -> str | None:
        return self._active_name

    def set_active(self, name: str) -> CredentialProfile:
        profile = self.store.get(name)
        if profile is None:
            raise unknown_profile_error(name, self.store.names)
        self._active_name = name
        logger.info(f"Switched active calendar to '{name}'")
        return profile

    def active_profile(self) -> CredentialProfile:
        """
        Resolve the calendar tools run against.

        Order: explicit selection, persisted default, first profile, then the
        LUMA_API_KEY bootstrap key when no calendars are configured at all.
        """
        if self._active_name:
            profile = self.store.get(self._active_name)
            if profile:
                return profile
            self._active_name = None

        profile = self.store.resolve_default()
        if profile:
            return profile

        if self.settings.api_key:
            return CredentialProfile(name=self.settings.bootstrap_profile_name, api_key=self.settings.api_key, description="From LUMA_API_KEY")

        raise no_calendars_error()

    def client_for(self, profile: CredentialProfile) -> LumaClient:
        client = self._clients.get(profile.name)
        if client is None or client.api_key != profile.api_key:
            client = self._client_factory(profile)
            self._clients[profile.name] = client
        return client

    def client(self) -> LumaClient:
        """Client for the active calendar"""
        return self.client_for(self.active_profile())

    async def discard_client(self, name: str):
        client = self._clients.pop(name, None)
        if client is not None:
            await client.close()

    async def close(self):
        for name in list(self._clients):
            await self.discard_client(name)
