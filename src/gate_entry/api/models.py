"""Pydantic models for visitor API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class VisitorEntryRequest(BaseModel):
    """Visitor entry form as submitted by the security desk or a guest."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str | None = None
    gender: str | None = "male"
    id_proof_description: str | None = Field(default=None, alias="idProofDescription")
    coming_from: str | None = Field(default=None, alias="comingFrom")
    purpose: str | None = None
    contact_number: str | None = Field(default=None, alias="contactNumber")
    resident_id: str | None = Field(default=None, alias="residentId")
    society_id: str | None = Field(default=None, alias="societyId")
    created_by: str | None = Field(default=None, alias="createdBy")
    photo: str | None = None

    def to_record(self) -> dict[str, object]:
        """Return the submitted fields as a domain-shape record."""
        return self.model_dump(by_alias=True, exclude_none=True)


class BlockRequest(BaseModel):
    """Resident blocking a visitor."""

    model_config = ConfigDict(populate_by_name=True)

    blocked_by: str = Field(alias="blockedBy")


class UnblockRequest(BaseModel):
    """Resident asking an administrator to lift a block."""

    model_config = ConfigDict(populate_by_name=True)

    requested_by: str = Field(alias="requestedBy")


class UnblockDecisionRequest(BaseModel):
    """Administrator approving an unblock request."""

    model_config = ConfigDict(populate_by_name=True)

    approved_by: str = Field(alias="approvedBy")
