"""Pydantic models for VC Client API requests, responses and callbacks."""

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    """Camel-case wire model that keeps unknown fields on round trips."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, object]:
        """Dump using wire field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CallbackSettings(_ApiModel):
    """Where and how the VC Client API reports progress back to us."""

    url: str = ""
    state: str = ""
    nonce: str = ""
    headers: dict[str, str] = Field(default_factory=dict)


class Registration(_ApiModel):
    """Relying party details shown in the wallet."""

    client_name: str = Field(default="", alias="clientName")
    logo_url: str | None = Field(default=None, alias="logoUrl")


class RequestedCredential(_ApiModel):
    """Credential a verifier asks the holder to present."""

    type: str = ""
    manifest: str
    purpose: str | None = None
    trusted_issuers: list[str] = Field(default_factory=list, alias="trustedIssuers")


class PresentationSection(_ApiModel):
    include_receipt: bool = Field(default=True, alias="includeReceipt")
    requested_credentials: list[RequestedCredential] = Field(
        alias="requestedCredentials", min_length=1
    )


class PresentationRequest(_ApiModel):
    """Template for a presentation (verification) request."""

    authority: str = ""
    include_qr_code: bool = Field(default=False, alias="includeQRCode")
    registration: Registration = Field(default_factory=Registration)
    callback: CallbackSettings = Field(default_factory=CallbackSettings)
    presentation: PresentationSection


class PinSettings(_ApiModel):
    value: str | None = None
    length: int = 0


class IssuanceSection(_ApiModel):
    type: str = ""
    manifest: str
    pin: PinSettings | None = None
    claims: dict[str, str] | None = None


class IssuanceRequest(_ApiModel):
    """Template for an issuance request."""

    authority: str = ""
    include_qr_code: bool = Field(default=False, alias="includeQRCode")
    registration: Registration = Field(default_factory=Registration)
    callback: CallbackSettings = Field(default_factory=CallbackSettings)
    issuance: IssuanceSection


class VcApiResponse(_ApiModel):
    """Response to a request submission, echoed to the browser."""

    request_id: str | None = Field(default=None, alias="requestId")
    url: str
    expiry: int | None = None


class ManifestInput(_ApiModel):
    issuer: str
    credential_issuer: str | None = Field(default=None, alias="credentialIssuer")


class ManifestDisplay(_ApiModel):
    card: dict[str, object] = Field(default_factory=dict)
    contract: object | None = None


class CredentialManifest(_ApiModel):
    """Credential contract manifest published by the issuer."""

    id: str
    input: ManifestInput
    display: ManifestDisplay = Field(default_factory=ManifestDisplay)

    def logo_uri(self) -> str | None:
        """Return the card logo URI, if the manifest has one."""
        logo = self.display.card.get("logo")
        if isinstance(logo, dict):
            uri = logo.get("uri")
            return str(uri) if uri else None
        return None


class CallbackBody(_ApiModel):
    """Callback notification posted by the VC Client API."""

    code: str | None = None
    state: str | None = None
    request_id: str | None = Field(default=None, alias="requestId")
    issuers: list[dict[str, object]] | None = None
    receipt: dict[str, object] | None = None

    def correlation_key(self) -> str | None:
        """Return the key the callback's record is stored under."""
        return self.state or self.request_id
