"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reviewscout.api.router import api_router
from reviewscout.config import settings
from reviewscout.db.turso import TursoClient
from reviewscout.identity.detector import DuplicateDetector
from reviewscout.identity.resolver import IdentityResolver
from reviewscout.identity.rules import load_merge_rules
from reviewscout.recommendation.aggregator import ContributionAggregator
from reviewscout.recommendation.schemas import TurnoverWeights, WhoDoWeights
from reviewscout.recommendation.service import RecommendationService
from reviewscout.repositories.contribution_repo import ContributionRepository
from reviewscout.repositories.contributor_repo import ContributorRepository
from reviewscout.repositories.duplicate_repo import DuplicateRepository

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _build_identity_resolver(
    contributor_repo: ContributorRepository,
    duplicate_repo: DuplicateRepository,
    contribution_repo: ContributionRepository,
) -> IdentityResolver:
    """Create the IdentityResolver with configured rules and thresholds.

    An invalid merge rule file fails startup.
    """
    rules = load_merge_rules(settings.merge_rules_path)
    detector = DuplicateDetector(
        medium_threshold=settings.auto_medium_threshold,
        high_threshold=settings.auto_high_threshold,
    )
    return IdentityResolver(
        contributor_repo=contributor_repo,
        duplicate_repo=duplicate_repo,
        contribution_repo=contribution_repo,
        detector=detector,
        rules=rules,
    )


def _build_recommendation_service(
    contribution_repo: ContributionRepository,
    contributor_repo: ContributorRepository,
) -> RecommendationService:
    """Create the RecommendationService from settings."""
    aggregator = ContributionAggregator(
        contribution_repo=contribution_repo,
        contributor_repo=contributor_repo,
        lookback_days=settings.lookback_days,
    )
    weights = TurnoverWeights(
        c1_turn=settings.turnover_c1,
        c2_turn=settings.turnover_c2,
        c1_ret=settings.retention_c1,
        c2_ret=settings.retention_c2,
    )
    whodo_weights = WhoDoWeights(
        c1_file_commits=settings.whodo_c1,
        c2_dir_commits=settings.whodo_c2,
        c3_file_reviews=settings.whodo_c3,
        c4_dir_reviews=settings.whodo_c4,
        theta=settings.whodo_theta,
    )
    return RecommendationService(
        aggregator=aggregator,
        top_n=settings.top_n,
        weights=weights,
        include_author=settings.include_author,
        exclude_unknown_file_candidates=settings.exclude_unknown_file_candidates,
        workload_window_days=settings.workload_window_days,
        whodo_weights=whodo_weights,
        whodo_load_window_days=settings.whodo_load_window_days,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Startup:
    - Initialize database connection
    - Create tables
    - Load merge rules and build services

    Shutdown:
    - Close database connection
    """
    logger.info(f"Starting {settings.app_name}...")

    db = TursoClient(url=settings.database_url, auth_token=settings.database_auth_token)
    await db.connect()
    app.state.db = db

    contributor_repo = ContributorRepository(db)
    duplicate_repo = DuplicateRepository(db)
    contribution_repo = ContributionRepository(db)
    await contributor_repo.initialize()
    await duplicate_repo.initialize()
    await contribution_repo.initialize()
    app.state.contributor_repo = contributor_repo
    app.state.duplicate_repo = duplicate_repo
    app.state.contribution_repo = contribution_repo
    logger.info("Repositories initialized")

    app.state.identity_resolver = _build_identity_resolver(
        contributor_repo, duplicate_repo, contribution_repo
    )
    app.state.recommendation_service = _build_recommendation_service(
        contribution_repo, contributor_repo
    )
    logger.info("Identity and recommendation services initialized")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await db.close()


app = FastAPI(
    title=settings.app_name,
    description="Code reviewer recommendation from contribution history",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "reviewscout.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
