import logging
import os
import socket
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI, Request, HTTPException, Response
from fastapi.responses import JSONResponse
from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.error import TelegramError

from dictionary_utils import build_dictionary
from shared.logging_utils import configure_logging
from wordrush_game import (
    GameEngine,
    GameSettings,
    TelegramNameResolver,
    TelegramNotifier,
    register_handlers,
)


TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
PUBLIC_URL = os.environ.get("PUBLIC_URL")
WEBHOOK_SECRET = os.environ.get("WEBHOOK_SECRET", "")
WEBHOOK_PATH = os.environ.get("WEBHOOK_PATH", "/webhook")
ALLOWED_UPDATES = ["message"]

configure_logging(extra_values=[TOKEN, WEBHOOK_SECRET])
logger = logging.getLogger(__name__)

app = FastAPI()

APPLICATION: Optional[Application] = None
ENGINE: Optional[GameEngine] = None

HELP_TEXT = (
    "<b>Word Rush</b>\n"
    "Every round a random letter is drawn. Send a dictionary word that starts with it "
    "before the time runs out, or you are eliminated. The last player standing wins.\n"
    "Each round the time gets shorter and the words get longer.\n"
    "\nCommands:\n"
    "• /wordgame [easy|medium|hard] — open a lobby or change its difficulty.\n"
    "• /wjoin — join the lobby.\n"
    "• /wstart — start the game (at least 2 players).\n"
    "• /w &lt;word&gt; — submit your word for the round.\n"
    "• /wordgame forfeit — leave a running game.\n"
    "• /wordgame end — stop the game for everyone."
)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if update.message:
        await update.message.reply_text(HELP_TEXT, parse_mode="HTML")


def build_engine(application: Application) -> GameEngine:
    names = TelegramNameResolver(application.bot)
    engine = GameEngine(
        TelegramNotifier(application.bot),
        build_dictionary(),
        names,
        settings=GameSettings.from_env(),
    )
    register_handlers(application, engine, names)
    return engine


def _can_resolve_webhook_host(webhook_url: str) -> bool:
    parsed = urlparse(webhook_url)
    host = parsed.hostname
    if not host:
        logger.error("Webhook URL %s does not contain a hostname", webhook_url)
        return False
    try:
        socket.getaddrinfo(host, None)
    except socket.gaierror as exc:
        logger.warning(
            "Skipping webhook registration for %s: failed to resolve host %s (%s)",
            webhook_url,
            host,
            exc,
        )
        return False
    return True


async def _register_webhook(webhook_url: str) -> None:
    await APPLICATION.bot.set_webhook(
        url=webhook_url,
        secret_token=WEBHOOK_SECRET,
        allowed_updates=ALLOWED_UPDATES,
    )


@app.on_event("startup")
async def on_startup() -> None:
    global APPLICATION, ENGINE
    APPLICATION = Application.builder().token(TOKEN).build()
    APPLICATION.add_handler(CommandHandler(["start", "help"], start))
    ENGINE = build_engine(APPLICATION)
    await APPLICATION.initialize()
    await APPLICATION.start()
    if PUBLIC_URL:
        webhook_url = f"{PUBLIC_URL.rstrip('/')}{WEBHOOK_PATH}"
        if _can_resolve_webhook_host(webhook_url):
            try:
                info = await APPLICATION.bot.get_webhook_info()
                webhook_is_different = info.url != webhook_url
            except TelegramError as exc:
                logger.warning("Failed to fetch current webhook info: %s", exc)
                webhook_is_different = True
            if webhook_is_different:
                try:
                    await _register_webhook(webhook_url)
                except TelegramError as exc:
                    logger.error("Failed to set webhook to %s: %s", webhook_url, exc)
        else:
            logger.warning("Telegram webhook will not be configured without a resolvable host")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    if ENGINE:
        ENGINE.shutdown()
    if APPLICATION:
        await APPLICATION.stop()
        await APPLICATION.shutdown()


@app.post(WEBHOOK_PATH)
async def telegram_webhook(request: Request) -> JSONResponse:
    if request.headers.get("X-Telegram-Bot-Api-Secret-Token") != WEBHOOK_SECRET:
        raise HTTPException(status_code=403, detail="Invalid secret")
    update = Update.de_json(await request.json(), APPLICATION.bot)
    await APPLICATION.process_update(update)
    return JSONResponse({"ok": True})


@app.get("/set_webhook")
async def set_webhook() -> JSONResponse:
    if not PUBLIC_URL:
        raise HTTPException(status_code=400, detail="PUBLIC_URL is not configured")
    webhook_url = f"{PUBLIC_URL.rstrip('/')}{WEBHOOK_PATH}"
    if not _can_resolve_webhook_host(webhook_url):
        raise HTTPException(status_code=503, detail="Webhook host cannot be resolved")
    try:
        await _register_webhook(webhook_url)
    except TelegramError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to set webhook: {exc}") from exc
    return JSONResponse({"url": webhook_url})


@app.get("/reset_webhook")
async def reset_webhook() -> JSONResponse:
    if not PUBLIC_URL:
        raise HTTPException(status_code=400, detail="PUBLIC_URL is not configured")
    webhook_url = f"{PUBLIC_URL.rstrip('/')}{WEBHOOK_PATH}"
    if not _can_resolve_webhook_host(webhook_url):
        raise HTTPException(status_code=503, detail="Webhook host cannot be resolved")
    try:
        await APPLICATION.bot.delete_webhook(drop_pending_updates=False)
        await _register_webhook(webhook_url)
    except TelegramError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to reset webhook: {exc}") from exc
    return JSONResponse({"reset_to": webhook_url})


@app.get("/")
async def root() -> JSONResponse:
    sessions = len(ENGINE.registry) if ENGINE else 0
    return JSONResponse({"message": "Word Rush service. See /healthz for status.", "sessions": sessions})


@app.get("/healthz")
async def healthz_get():
    return {"status": "ok"}

@app.head("/healthz", include_in_schema=False)
async def healthz_head():
    # HEAD needs no body
    return Response(status_code=200)
