from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass

from app.ai.factory import get_ai_client
from app.ai.types import AIClient
from app.core.config import Settings
from app.core.profile_store import ProfileStore
from app.core.security import IdentityProvider, SignedSessionVerifier
from app.services.cover_letter import CoverLetterGenerator
from app.services.match_scorer import MatchScorer
from app.services.profile_service import ProfileDocumentStore, ProfileService
from app.services.resume_classifier import ResumeClassifier
from app.services.text_extraction import TextExtractor

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Client handles shared by request handlers; owned by the app lifespan."""

    identity: IdentityProvider
    store: ProfileDocumentStore
    llm: AIClient
    profiles: ProfileService
    scorer: MatchScorer
    cover_letters: CoverLetterGenerator
    classifier: ResumeClassifier
    text_extractor: TextExtractor
    upload_extractor: TextExtractor

    async def aclose(self) -> None:
        for handle in (self.llm, self.store):
            closer = getattr(handle, "aclose", None) or getattr(handle, "close", None)
            if closer is None:
                continue
            result = closer()
            if inspect.isawaitable(result):
                await result


def assemble_services(
    *,
    identity: IdentityProvider,
    store: ProfileDocumentStore,
    llm: AIClient,
    settings: Settings,
) -> AppServices:
    return AppServices(
        identity=identity,
        store=store,
        llm=llm,
        profiles=ProfileService(store),
        scorer=MatchScorer(llm),
        cover_letters=CoverLetterGenerator(llm),
        classifier=ResumeClassifier(llm),
        text_extractor=TextExtractor(
            max_size_bytes=settings.max_upload_bytes,
            timeout_s=settings.extract_timeout_s,
            allowed_types=settings.allowed_upload_types,
        ),
        upload_extractor=TextExtractor(
            max_size_bytes=settings.max_upload_bytes,
            timeout_s=settings.upload_timeout_s,
            allowed_types=settings.allowed_upload_types,
        ),
    )


def build_services(settings: Settings) -> AppServices:
    llm = get_ai_client(settings)
    logger.info(
        "services_ready provider=%s llm=%s profile_db=%s",
        settings.ai_provider,
        type(llm).__name__,
        settings.profile_db_path,
    )
    return assemble_services(
        identity=SignedSessionVerifier(settings.session_secret),
        store=ProfileStore(settings.profile_db_path),
        llm=llm,
        settings=settings,
    )
