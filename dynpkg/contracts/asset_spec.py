from pydantic import BaseModel, Field


class AssetSpec(BaseModel):
    source_url: str = Field(..., min_length=1, description="Where to download from")
    destination_path: str = Field(..., min_length=1, description="Target file, relative to the workspace")
