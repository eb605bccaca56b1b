"""Report schemas for the capture and apply phases."""

from typing import Literal

from pydantic import BaseModel, Field


class AssetRecord(BaseModel):
    """Tracking decision for one reference found on a template."""

    reference: str = Field(description="Reference exactly as written in the template")
    status: Literal["tracked", "external", "missing"] = Field(description="Tracking outcome")
    resolved_path: str | None = Field(default=None, description="Filesystem path of the reference")
    canonical_path: str | None = Field(
        default=None,
        description="Un-timestamped artifact whose content is tracked",
    )
    digest: str | None = Field(default=None, description="sha256 of the canonical content")
    mtime: str | None = Field(default=None, description="ISO modification time of the artifact")


class TemplateCapture(BaseModel):
    """References captured on one template."""

    template: str = Field(description="Template path")
    assets: list[AssetRecord] = Field(default_factory=list)

    @property
    def tracked_count(self) -> int:
        return sum(1 for asset in self.assets if asset.status == "tracked")


class CaptureReport(BaseModel):
    """Result of the capture phase for a target."""

    target: str = Field(description="Target identifier")
    templates: list[TemplateCapture] = Field(default_factory=list)


class ArtifactUpdate(BaseModel):
    """A canonical artifact that received a new timestamped copy."""

    canonical_path: str = Field(description="Un-timestamped artifact")
    new_path: str = Field(description="Newly created timestamped copy")
    references: list[str] = Field(description="Template references now pointing at the copy")
    deleted: list[str] = Field(default_factory=list, description="Old copies removed")


class ApplyReport(BaseModel):
    """Result of the apply phase for a target."""

    target: str = Field(description="Target identifier")
    timestamp: str = Field(description="ISO timestamp of the apply phase")
    changed_references: list[str] = Field(default_factory=list)
    artifacts: list[ArtifactUpdate] = Field(default_factory=list)
    rewritten_templates: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changed_references)
