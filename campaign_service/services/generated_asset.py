# campaign_service/services/generated_asset.py

from dataclasses import dataclass
from typing import Optional

from campaign_service.models.enums import AssetType, Platform


@dataclass(frozen=True)
class GeneratedAsset:
    """One asset produced by the pipeline, not yet persisted."""

    type: AssetType
    content: str
    platform: Optional[Platform] = None
