"""User and template registries backed by config maps."""

import logging
from dataclasses import dataclass
from typing import Protocol

from playground_engine.domain.errors import EngineError, MissingDataError
from playground_engine.domain.templates import Template
from playground_engine.domain.users import User
from playground_engine.services.codec import dump_yaml, parse_yaml
from playground_engine.services.naming import TEMPLATES_CONFIG_MAP, USERS_CONFIG_MAP

logger = logging.getLogger(__name__)


class ConfigMapRepository(Protocol):
    """Key to text registries stored in config maps."""

    async def get_config_map_data(self, name: str) -> dict[str, str] | None:
        """Return the data of a config map, or `None` when it holds none."""

    async def add_config_map_value(self, name: str, key: str, value: str) -> None:
        """Add or overwrite a single key."""

    async def remove_config_map_value(self, name: str, key: str) -> None:
        """Remove a single key."""


async def _registry(repository: ConfigMapRepository, name: str) -> dict[str, str]:
    data = await repository.get_config_map_data(name)
    if data is None:
        raise MissingDataError("config map")
    return data


@dataclass
class TemplateService:
    """Read access to the template registry."""

    repository: ConfigMapRepository

    async def list_templates(self) -> dict[str, Template]:
        """Return parsable templates keyed by id; broken entries are skipped."""
        templates: dict[str, Template] = {}
        entries = await _registry(self.repository, TEMPLATES_CONFIG_MAP)
        for key in sorted(entries):
            try:
                templates[key] = parse_yaml(Template, entries[key])
            except EngineError:
                logger.error("Error while parsing template %s", key)
        return templates

    async def get_template(self, template_id: str) -> Template | None:
        templates = await self.list_templates()
        return templates.get(template_id)


@dataclass
class UserService:
    """Application service for the user registry."""

    repository: ConfigMapRepository

    async def get_user(self, user_id: str) -> User | None:
        users = await _registry(self.repository, USERS_CONFIG_MAP)
        value = users.get(user_id)
        if value is None:
            return None
        return parse_yaml(User, value)

    async def list_users(self) -> dict[str, User]:
        """Return every user; a malformed entry fails the whole call."""
        users = await _registry(self.repository, USERS_CONFIG_MAP)
        return {key: parse_yaml(User, users[key]) for key in sorted(users)}

    async def create_user(self, user_id: str, user: User) -> None:
        await self.repository.add_config_map_value(
            USERS_CONFIG_MAP, user_id, dump_yaml(user)
        )

    async def update_user(self, user_id: str, user: User) -> None:
        """Overwrite an existing user."""
        if await self.get_user(user_id) is None:
            raise MissingDataError("no matching user")
        await self.repository.add_config_map_value(
            USERS_CONFIG_MAP, user_id, dump_yaml(user)
        )

    async def delete_user(self, user_id: str) -> None:
        await self.repository.remove_config_map_value(USERS_CONFIG_MAP, user_id)
