"""Credential store: named Luma API keys persisted to a local JSON file"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from .errors import unknown_profile_error
from .models import CredentialProfile, CredentialStoreData

logger = logging.getLogger(__name__)


def mask_api_key(api_key: str) -> str:
    """Show only enough of a key to tell keys apart"""
    if len(api_key) <= 8:
        return "*" * len(api_key)
    return f"{api_key[:4]}...{api_key[-4:]}"


@dataclass
class RemoveResult:
    """Outcome of a remove call"""

    name: str
    removed: bool
    needs_confirmation: bool = False
    new_default: str | None = None


class CredentialStore:
    """
    Ordered set of calendar profiles plus a default selector.

    Every mutation is written to disk immediately. The first profile ever added
    becomes the default when none is set.
    """

    def __init__(self, path: Path, data: CredentialStoreData | None = None):
        self.path = Path(path)
        self._data = data or CredentialStoreData()

    @classmethod
    def load(cls, path: Path) -> "CredentialStore":
        """Read the store; a missing, unreadable or corrupt file yields an empty store"""
        path = Path(path)
        if not path.exists():
            logger.info(f"No calendars file at {path}, starting with an empty store")
            return cls(path)

        try:
            data = CredentialStoreData.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, ValueError) as e:
            logger.warning(f"Could not read calendars file {path}, treating it as empty: {e}")
            return cls(path)

        store = cls(path, data)
        if data.default_profile and store.get(data.default_profile) is None:
            logger.warning(f"Default calendar '{data.default_profile}' is not configured, ignoring it")
            data.default_profile = data.profiles[0].name if data.profiles else None
        logger.info(f"Loaded {len(data.profiles)} calendar(s) from {path}")
        return store

    def save(self):
        """Persist the whole store, replacing the file atomically"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(self._data.model_dump_json(by_alias=True, exclude_none=True, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    @property
    def profiles(self) -> list[CredentialProfile]:
        return list(self._data.profiles)

    @property
    def names(self) -> list[str]:
        return [profile.name for profile in self._data.profiles]

    @property
    def default_profile(self) -> str | None:
        return self._data.default_profile

    def is_empty(self) -> bool:
        return not self._data.profiles

    def get(self, name: str) -> CredentialProfile | None:
        for profile in self._data.profiles:
            if profile.name == name:
                return profile
        return None

    def resolve_default(self) -> CredentialProfile | None:
        """The persisted default, else the first profile, else None"""
        if self._data.default_profile:
            profile = self.get(self._data.default_profile)
            if profile:
                return profile
        return self._data.profiles[0] if self._data.profiles else None

    def upsert(self, name: str, api_key: str, description: str | None = None) -> tuple[CredentialProfile, bool]:
        """
        Insert a profile or overwrite the one with the same name in place.

        Returns:
            (profile, created) where created is False for an overwrite
        """
        existing = self.get(name)
        if description is None and existing is not None:
            description = existing.description
        profile = CredentialProfile(name=name, api_key=api_key, description=description)

        if existing is None:
            self._data.profiles.append(profile)
        else:
            index = self._data.profiles.index(existing)
            self._data.profiles[index] = profile

        if not self._data.default_profile:
            self._data.default_profile = name

        self.save()
        logger.info(f"{'Added' if existing is None else 'Updated'} calendar '{name}'")
        return profile, existing is None

    def set_default(self, name: str):
        if self.get(name) is None:
            raise unknown_profile_error(name, self.names)
        self._data.default_profile = name
        self.save()
        logger.info(f"Default calendar set to '{name}'")

    def remove(self, name: str, confirm: bool = False) -> RemoveResult:
        """Delete a profile; without confirm nothing changes"""
        profile = self.get(name)
        if profile is None:
            raise unknown_profile_error(name, self.names)
        if not confirm:
            return RemoveResult(name=name, removed=False, needs_confirmation=True)

        self._data.profiles.remove(profile)
        if self._data.default_profile == name:
            self._data.default_profile = self._data.profiles[0].name if self._data.profiles else None

        self.save()
        logger.info(f"Removed calendar '{name}'")
        return RemoveResult(name=name, removed=True, new_default=self._data.default_profile)
