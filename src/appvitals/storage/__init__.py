"""Persistence gateways for applications, repositories and logs."""

from appvitals.storage.base import InMemoryGateway, PersistenceGateway
from appvitals.storage.json_file import JsonFileGateway

__all__ = ["PersistenceGateway", "InMemoryGateway", "JsonFileGateway"]
