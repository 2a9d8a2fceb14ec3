from pydantic import BaseModel, Field

IDENTITY_PATTERN = r"^[a-z][a-z0-9]*$"
MIN_IDENTITY_LENGTH = 4
MAX_IDENTITY_LENGTH = 32


class IdentityRecord(BaseModel):
    identity: str = Field(
        ...,
        pattern=IDENTITY_PATTERN,
        min_length=MIN_IDENTITY_LENGTH,
        max_length=MAX_IDENTITY_LENGTH,
        description="Generated package segment",
    )
    created_at: str = Field(default="Unknown", description="Human-readable, informational only")

    model_config = {"frozen": True}
