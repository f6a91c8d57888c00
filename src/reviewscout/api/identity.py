"""Identity resolution API endpoints.

Provides endpoints for running duplicate detection, reviewing pending
duplicates and executing merges.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from reviewscout.errors import StoreError
from reviewscout.identity.resolver import IdentityResolver
from reviewscout.identity.schemas import (
    DuplicateRecord,
    MergeOutcome,
    MergePriority,
)

router = APIRouter(prefix="/identity", tags=["identity"])


class DetectResponse(BaseModel):
    """Summary of a detection pass."""

    manual: int = Field(description="Decisions from manual rules")
    automatic: int = Field(description="Decisions from automatic detection")
    recorded: int = Field(description="Decisions written to the audit trail")
    failed: int = Field(description="Decisions that failed to record")
    skipped_rules: list[str] = Field(
        default_factory=list,
        description="Rules whose primary contributor does not exist",
    )


class MergeRequest(BaseModel):
    """Which pending duplicates to merge."""

    priority: MergePriority = Field(
        default=MergePriority.MANUAL, description="Merge records of this priority"
    )
    merge_all: bool = Field(
        default=False, description="Merge every pending record regardless of priority"
    )


class MergeResponse(BaseModel):
    """Outcome of a merge batch."""

    merged: int
    skipped: int
    failed: int
    outcomes: list[MergeOutcome]


def get_identity_resolver(request: Request) -> IdentityResolver:
    """Dependency to get IdentityResolver from app state."""
    return request.app.state.identity_resolver


@router.post("/detect", response_model=DetectResponse)
async def detect_duplicates(
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> DetectResponse:
    """Run manual rules, then automatic detection, and record the results."""
    try:
        report = await resolver.run_detection()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=f"Store unavailable: {e}") from e

    return DetectResponse(
        manual=len(report.manual_decisions),
        automatic=len(report.automatic_decisions),
        recorded=report.recorded,
        failed=report.failed,
        skipped_rules=report.skipped_rules,
    )


@router.get("/duplicates", response_model=list[DuplicateRecord])
async def list_duplicates(
    priority: MergePriority | None = None,
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> list[DuplicateRecord]:
    """List duplicates awaiting a merge, most similar first."""
    try:
        return await resolver.list_pending(priority)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=f"Store unavailable: {e}") from e


@router.post("/merge", response_model=MergeResponse)
async def merge_duplicates(
    request: MergeRequest,
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> MergeResponse:
    """Merge pending duplicates into their primaries.

    Individual failures are reported in the response, not raised.
    """
    try:
        report = await resolver.merge_pending(
            priority=request.priority, merge_all=request.merge_all
        )
    except StoreError as e:
        raise HTTPException(status_code=503, detail=f"Store unavailable: {e}") from e

    return MergeResponse(
        merged=report.merged,
        skipped=report.skipped,
        failed=report.failed,
        outcomes=report.outcomes,
    )
