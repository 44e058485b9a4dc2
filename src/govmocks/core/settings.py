"""Typed settings for the integrations a mock deployment points at."""

from __future__ import annotations

from typing import Annotated, ClassVar
from urllib.parse import urlsplit

from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    StrictBool,
    StrictStr,
    TypeAdapter,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from govmocks.core.keypaths import KeyPath

ENDPOINT_SUFFIX = "_endpoint"
ALLOWED_SCHEMES = frozenset({"http", "https"})

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def is_endpoint_key(segment: str) -> bool:
    return segment.endswith(ENDPOINT_SUFFIX)


def check_endpoint_url(value: object) -> str:
    """Validate an endpoint URL and return it unchanged.

    The URL must be absolute (``scheme://host[:port][/path]``) with an
    ``http`` or ``https`` scheme. Unlike pydantic's URL types the original
    string is returned as written, without a trailing slash being added.

    Raises:
        ValueError: If the value is not an acceptable endpoint URL.

    """
    if not isinstance(value, str):
        msg = f"endpoint must be a URL string, got {type(value).__name__}"
        raise ValueError(msg)
    if not value:
        msg = "endpoint must not be empty"
        raise ValueError(msg)
    if any(ch.isspace() for ch in value):
        msg = "endpoint must not contain whitespace"
        raise ValueError(msg)

    parts = urlsplit(value)
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        msg = f"endpoint scheme must be http or https, got {parts.scheme or 'none'!r}"
        raise ValueError(msg)
    if not value[len(parts.scheme) :].startswith("://") or not parts.hostname:
        msg = "endpoint must be an absolute URL of the form scheme://host[:port]/path"
        raise ValueError(msg)
    try:
        parts.port  # noqa: B018
    except ValueError as e:
        msg = f"endpoint has an invalid port: {e}"
        raise ValueError(msg) from e

    try:
        _HTTP_URL.validate_python(value)
    except PydanticValidationError as e:
        msg = f"endpoint is not a valid URL: {e.errors()[0]['msg']}"
        raise ValueError(msg) from e
    return value


EndpointUrl = Annotated[str, AfterValidator(check_endpoint_url)]


class IntegrationSettings(BaseModel):
    """Base for settings read from one Drupal configuration object."""

    config_name: ClassVar[KeyPath] = ()

    model_config = ConfigDict(frozen=True, extra="ignore")


class OpenIDConnectClientSettings(BaseModel):
    """Client credentials and endpoints of the generic OpenID Connect provider."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    client_id: StrictStr = Field(default="", description="OAuth client identifier")
    client_secret: SecretStr = Field(default=SecretStr(""), description="OAuth client secret")
    authorization_endpoint: EndpointUrl | None = None
    token_endpoint: EndpointUrl | None = None
    userinfo_endpoint: EndpointUrl | None = None
    end_session_endpoint: EndpointUrl | None = None


class OpenIDConnectProviderSettings(IntegrationSettings):
    """``openid_connect.settings.generic``: the MitID mock identity provider."""

    config_name: ClassVar[KeyPath] = ("openid_connect", "settings", "generic")

    enabled: StrictBool = False
    settings: OpenIDConnectClientSettings = Field(default_factory=OpenIDConnectClientSettings)

    @model_validator(mode="after")
    def _secret_required_when_enabled(self) -> OpenIDConnectProviderSettings:
        if self.enabled and not self.settings.client_secret.get_secret_value():
            msg = "client_secret must not be empty when enabled is true"
            raise ValueError(msg)
        return self


class ServiceplatformenSettings(IntegrationSettings):
    """``serviceplatformen.settings``: CPR, CVR and Digital Post mock endpoints."""

    config_name: ClassVar[KeyPath] = ("serviceplatformen", "settings")

    cpr_endpoint: EndpointUrl | None = None
    cvr_endpoint: EndpointUrl | None = None
    digital_post_endpoint: EndpointUrl | None = None


INTEGRATIONS: tuple[type[IntegrationSettings], ...] = (
    OpenIDConnectProviderSettings,
    ServiceplatformenSettings,
)
