"""Template payloads stored as YAML in the template registry."""

from pydantic import BaseModel, ConfigDict


class NameValuePair(BaseModel):
    """Environment variable declared by a template."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class Port(BaseModel):
    """Extra port exposed by a template."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    port: int
    protocol: str | None = None
    target: int | None = None


class RuntimeConfiguration(BaseModel):
    """Runtime shape of a template container."""

    model_config = ConfigDict(frozen=True)

    env: list[NameValuePair] | None = None
    ports: list[Port] | None = None


class Template(BaseModel):
    """Image and runtime shape a session is instantiated from."""

    model_config = ConfigDict(frozen=True)

    image: str
    name: str | None = None
    description: str | None = None
    tags: dict[str, str] | None = None
    runtime: RuntimeConfiguration | None = None

    def env_vars(self) -> list[NameValuePair]:
        """Return the declared environment variables, if any."""
        if self.runtime is None or self.runtime.env is None:
            return []
        return list(self.runtime.env)

    def ports(self) -> list[Port]:
        """Return the declared extra ports, if any."""
        if self.runtime is None or self.runtime.ports is None:
            return []
        return list(self.runtime.ports)
