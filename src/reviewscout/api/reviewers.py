"""Reviewer recommendation API endpoints.

Returns plain scored records; rendering them is left to the caller.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from reviewscout.errors import StoreError
from reviewscout.recommendation.schemas import (
    FileRiskReport,
    ReviewerScore,
    TurnoverScore,
    TurnoverWeights,
    WhoDoScore,
    WhoDoWeights,
    WorkloadReport,
)
from reviewscout.recommendation.service import RecommendationService

router = APIRouter(prefix="/reviewers", tags=["reviewers"])


class ChangeSetRequest(BaseModel):
    """A change set to recommend reviewers for."""

    files: list[str] = Field(description="Current paths of the changed files")
    created_at: datetime | None = Field(
        default=None, description="Change creation time (default: now)"
    )
    author: str | None = Field(default=None, description="Login of the change author")
    top_n: int | None = Field(default=None, gt=0, description="Override cutoff")


class TurnoverRequest(ChangeSetRequest):
    """Change set plus optional weight overrides."""

    weights: TurnoverWeights | None = None


class WhoDoRequest(ChangeSetRequest):
    """Change set plus optional WhoDo weights and its pull request number."""

    weights: WhoDoWeights | None = None
    pr_number: int | None = Field(
        default=None, description="Pull request excluded from open-review load"
    )


class WorkloadRequest(BaseModel):
    """Reference time for the workload window."""

    reference_time: datetime | None = None


def get_recommendation_service(request: Request) -> RecommendationService:
    """Dependency to get RecommendationService from app state."""
    return request.app.state.recommendation_service


def _unavailable(e: StoreError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Store unavailable: {e}")


@router.post("/chrev", response_model=list[ReviewerScore])
async def recommend_chrev(
    request: ChangeSetRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> list[ReviewerScore]:
    """Rank reviewers by expertise on the changed files.

    An empty or malformed change set returns an empty list.
    """
    try:
        return await service.recommend_chrev(
            request.files,
            reference_time=request.created_at,
            author_login=request.author,
            top_n=request.top_n,
        )
    except StoreError as e:
        raise _unavailable(e) from e


@router.post("/turnover", response_model=list[TurnoverScore])
async def recommend_turnover(
    request: TurnoverRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> list[TurnoverScore]:
    """Rank reviewers by the knowledge-spreading turnover composite."""
    try:
        return await service.recommend_turnover(
            request.files,
            reference_time=request.created_at,
            author_login=request.author,
            top_n=request.top_n,
            weights=request.weights,
        )
    except StoreError as e:
        raise _unavailable(e) from e


@router.post("/whodo", response_model=list[WhoDoScore])
async def recommend_whodo(
    request: WhoDoRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> list[WhoDoScore]:
    """Rank reviewers by file and directory expertise, discounted by load."""
    try:
        return await service.recommend_whodo(
            request.files,
            reference_time=request.created_at,
            author_login=request.author,
            top_n=request.top_n,
            weights=request.weights,
            pr_number=request.pr_number,
        )
    except StoreError as e:
        raise _unavailable(e) from e


@router.post("/workload", response_model=WorkloadReport)
async def review_workload(
    request: WorkloadRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> WorkloadReport:
    """Review load distribution over the trailing workload window."""
    try:
        return await service.workload(request.reference_time)
    except StoreError as e:
        raise _unavailable(e) from e


@router.post("/files", response_model=list[FileRiskReport])
async def file_risks(
    request: ChangeSetRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> list[FileRiskReport]:
    """Flag abandoned and hoarded files in a change set."""
    try:
        return await service.file_risks(request.files, request.created_at)
    except StoreError as e:
        raise _unavailable(e) from e
