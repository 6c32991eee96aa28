from __future__ import annotations

import random
from typing import Dict, List

from fastapi import APIRouter, Depends, Request, Response
from loguru import logger

from quizgate.core.config import Settings
from quizgate.core.errors import NotFound, Unauthorized
from quizgate.deps import get_clock, get_issuer, get_ledger, get_notifier, get_rng, get_settings, get_vault
from quizgate.schemas import (
    Hit,
    PingResponse,
    PublicQuestion,
    RegistrationRequest,
    RegistrationResponse,
    StatsRequest,
    StatsResponse,
    SuccessResponse,
    TrackRequest,
    ValidateQuizRequest,
    ValidateQuizResponse,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from quizgate.services.credentials import verify_password
from quizgate.services.ledger import AnalyticsLedger
from quizgate.services.notifier import EmailNotifier
from quizgate.services.quiz import sample_questions, score_answers
from quizgate.services.tokens import TokenIssuer
from quizgate.services.vault import VaultClient
from quizgate.utils.helpers import Clock, iso_timestamp

router = APIRouter()

CORS_METHODS = "POST, GET, OPTIONS"
CORS_HEADERS = "Content-Type"


def cors_headers(settings: Settings, request: Request) -> Dict[str, str]:
    origins = settings.ALLOWED_ORIGINS
    origin = request.headers.get("origin")
    if "*" in origins:
        allow = "*"
    elif origin and origin in origins:
        allow = origin
    else:
        return {}
    return {
        "Access-Control-Allow-Origin": allow,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Allow-Headers": CORS_HEADERS,
    }


@router.get("/ping", response_model=PingResponse)
async def ping(clock: Clock = Depends(get_clock)) -> PingResponse:
    return PingResponse(status="online", timestamp=iso_timestamp(clock))


@router.post("/track", response_model=SuccessResponse)
async def track(
    req: TrackRequest,
    ledger: AnalyticsLedger = Depends(get_ledger),
    clock: Clock = Depends(get_clock),
) -> SuccessResponse:
    hit = Hit(
        path=req.path,
        referrer=req.referrer or "Direct",
        user_agent=req.user_agent or "Unknown",
        timestamp=iso_timestamp(clock),
    )
    await ledger.record_hit(hit)
    return SuccessResponse()


@router.post("/stats", response_model=StatsResponse)
async def stats(
    req: StatsRequest,
    vault: VaultClient = Depends(get_vault),
    ledger: AnalyticsLedger = Depends(get_ledger),
) -> StatsResponse:
    """
    Admin summary. The password is checked against the hash kept in the
    vault; the hash itself never leaves this function.
    """
    stored_hash = await vault.admin_hash()
    if not verify_password(req.password, stored_hash):
        logger.warning("Rejected stats request with a bad password")
        raise Unauthorized()

    summary = await ledger.read_stats()
    return StatsResponse(
        active_users=summary.estimated_active_users,
        page_views=summary.total_views,
        total_registrations=summary.total_registrations,
        hits=summary.hits,
    )


@router.post("/send-registration", response_model=RegistrationResponse)
async def send_registration(
    req: RegistrationRequest,
    ledger: AnalyticsLedger = Depends(get_ledger),
    notifier: EmailNotifier = Depends(get_notifier),
) -> RegistrationResponse:
    # analytics is a side effect; a broken store must not block the invitation
    try:
        await ledger.record_registration()
    except Exception:
        logger.exception("Could not record registration")

    await notifier.send_invitation(req.email)
    return RegistrationResponse(success=True, message=f"Quiz invitation sent to {req.email}")


@router.get("/get-questions", response_model=List[PublicQuestion])
async def get_questions(
    vault: VaultClient = Depends(get_vault),
    settings: Settings = Depends(get_settings),
    rng: random.Random = Depends(get_rng),
) -> List[PublicQuestion]:
    bank = await vault.question_bank()
    return sample_questions(bank, settings.QUIZ_SIZE, rng)


@router.post("/validate-quiz", response_model=ValidateQuizResponse, response_model_exclude_none=True)
async def validate_quiz(
    req: ValidateQuizRequest,
    vault: VaultClient = Depends(get_vault),
    settings: Settings = Depends(get_settings),
    issuer: TokenIssuer = Depends(get_issuer),
) -> ValidateQuizResponse:
    """
    Score submitted answers against the vault's answer key. A failing score
    is a normal 200 response with success=false and no token.
    """
    bank = await vault.question_bank()
    result = score_answers(bank, req.answers, settings.PASS_THRESHOLD)
    if result.passed:
        result.token = issuer.issue(req.email, result.passed)
        logger.info("Quiz passed by {} with score {}", req.email, result.score)
    else:
        logger.info("Quiz failed by {} with score {}", req.email, result.score)
    return ValidateQuizResponse(success=result.passed, score=result.score, token=result.token)


@router.post("/verify-token", response_model=VerifyTokenResponse, response_model_exclude_none=True)
async def verify_token(req: VerifyTokenRequest, issuer: TokenIssuer = Depends(get_issuer)) -> VerifyTokenResponse:
    claims = issuer.inspect(req.token)
    if claims is None:
        return VerifyTokenResponse(valid=False)
    return VerifyTokenResponse(valid=True, email=claims.identity, issued_at=claims.issued_at)


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"], include_in_schema=False)
async def fallback(path: str, request: Request, settings: Settings = Depends(get_settings)) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=cors_headers(settings, request))
    raise NotFound()
