"""FastAPI server exposing prompt deck endpoints."""

import asyncio

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from logic.prompt_parser import parse_prompt
from logic.validation import LockRequest, PromptRequest, SaveOutfitRequest, SkipRequest, UnlockRequest
from memory.deck_store import DeckSessionError
from stylist_app.app import PromptStylistApp


class ParseRequest(BaseModel):
    """Request payload for a dry-run parse of a prompt."""

    prompt: str = Field("", max_length=500, description="Free-text styling request")


def get_stylist(request: Request) -> PromptStylistApp:
    """Return the app bound to the running FastAPI instance."""

    return request.app.state.stylist


def _not_found(exc: DeckSessionError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


def create_app(stylist: PromptStylistApp | None = None) -> FastAPI:
    """Build the FastAPI application around ``stylist`` (or a default app)."""

    app = FastAPI(title="Prompt Stylist", version="0.1.0")
    app.state.stylist = stylist or PromptStylistApp()

    @app.get("/healthz")
    async def healthcheck(stylist: PromptStylistApp = Depends(get_stylist)) -> dict:
        """Lightweight readiness check."""

        return {
            "status": "ok",
            "service": "prompt-stylist",
            "environment": stylist.config.environment or "local",
        }

    @app.post("/prompt/parse")
    async def parse(request: ParseRequest) -> dict:
        """Return the structured query a prompt parses into, without generating outfits."""

        return parse_prompt(request.prompt).to_dict()

    @app.post("/prompt/decks")
    async def start_deck(request: PromptRequest, stylist: PromptStylistApp = Depends(get_stylist)) -> dict:
        response = await stylist.prompt_stylist.start_deck(request.user_id, request.prompt, request.count)
        if response.get("status") == "needs_review":
            raise HTTPException(status_code=422, detail=response)
        if response.get("status") == "error":
            raise HTTPException(status_code=400, detail=response.get("message", "deck generation failed"))
        return response

    @app.get("/prompt/decks/{session_id}")
    async def get_deck(session_id: str, stylist: PromptStylistApp = Depends(get_stylist)) -> dict:
        try:
            return stylist.prompt_stylist.get_session(session_id)
        except DeckSessionError as exc:
            raise _not_found(exc) from exc

    @app.post("/prompt/decks/{session_id}/skip")
    async def skip(
        session_id: str, request: SkipRequest, stylist: PromptStylistApp = Depends(get_stylist)
    ) -> dict:
        try:
            return await stylist.prompt_stylist.skip(session_id, request.candidate_id)
        except DeckSessionError as exc:
            raise _not_found(exc) from exc

    @app.post("/prompt/decks/{session_id}/lock")
    async def lock(
        session_id: str, request: LockRequest, stylist: PromptStylistApp = Depends(get_stylist)
    ) -> dict:
        try:
            return await stylist.prompt_stylist.lock(session_id, request.kind, request.item_id)
        except DeckSessionError as exc:
            raise _not_found(exc) from exc

    @app.post("/prompt/decks/{session_id}/unlock")
    async def unlock(
        session_id: str, request: UnlockRequest, stylist: PromptStylistApp = Depends(get_stylist)
    ) -> dict:
        try:
            return await stylist.prompt_stylist.unlock(session_id, request.kind)
        except DeckSessionError as exc:
            raise _not_found(exc) from exc

    @app.post("/prompt/decks/{session_id}/save")
    async def save(
        session_id: str, request: SaveOutfitRequest, stylist: PromptStylistApp = Depends(get_stylist)
    ) -> dict:
        try:
            result = await asyncio.to_thread(
                stylist.prompt_stylist.save,
                session_id,
                request.candidate_id,
                name=request.name,
                description=request.description,
                occasion=request.occasion,
                target_date=request.target_date,
                is_favorite=request.is_favorite,
            )
        except DeckSessionError as exc:
            raise _not_found(exc) from exc
        if result.get("status") != "ok":
            raise HTTPException(status_code=400, detail=result.get("message", "save failed"))
        return result

    return app


app = create_app()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=int("8080"), reload=False)
