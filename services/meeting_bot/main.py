#!/usr/bin/env python3
"""
Bot entry point: runs one bot session described by environment variables.

BOT_PARAMS holds the session parameters as JSON, MEETING_PROVIDER names the
browser harness class ("module.path:ClassName").
"""

import asyncio
import importlib
import logging
import os
import signal
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from shared.config import get_settings
from shared.schemas import MeetingParams

from .context import MeetingContext
from .provider import MeetingProvider
from .recording.transcoder import Transcoder
from .session_registry import SessionRegistry
from .state_machine import MeetingOutcome, MeetingStateMachine
from .status_reporter import StatusReporter

# Load environment variables
load_dotenv()

settings = get_settings()


class InterceptHandler(logging.Handler):
    """Route stdlib logging records of the service modules into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or settings.log_level).upper()
    logger.remove()
    logger.add(sys.stdout, level=log_level)
    logging.basicConfig(handlers=[InterceptHandler()], level=log_level, force=True)


def load_params() -> MeetingParams:
    raw = os.getenv("BOT_PARAMS", "")
    if not raw:
        raise ValueError("BOT_PARAMS environment variable is required")
    return MeetingParams.model_validate_json(raw)


def load_provider(path: Optional[str] = None) -> MeetingProvider:
    path = path or settings.meeting_provider
    if not path or ":" not in path:
        raise ValueError("MEETING_PROVIDER must be set to 'module.path:ClassName'")

    module_name, class_name = path.split(":", 1)
    provider_class = getattr(importlib.import_module(module_name), class_name)
    provider = provider_class()
    if not isinstance(provider, MeetingProvider):
        raise TypeError(f"{path} is not a MeetingProvider")
    return provider


def build_context(params: MeetingParams, provider: MeetingProvider) -> MeetingContext:
    session_id = params.session_id or params.id
    return MeetingContext(
        params=params,
        provider=provider,
        transcoder=Transcoder(session_id=session_id, s3_key=params.mp4_s3_path),
        session_registry=SessionRegistry() if params.session_id else None,
        status_reporter=StatusReporter(params),
    )


async def run_bot(params: MeetingParams, provider: MeetingProvider) -> MeetingOutcome:
    context = build_context(params, provider)
    machine = MeetingStateMachine(context)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, machine.request_stop)
        except NotImplementedError:
            logger.debug(f"Signal handler for {sig.name} not supported on this platform")

    try:
        return await machine.run()
    finally:
        if context.session_registry is not None:
            try:
                await context.session_registry.close()
            except Exception as e:
                logger.warning(f"Error closing session registry: {e}")


def main() -> int:
    """Main entry point"""
    configure_logging()

    try:
        params = load_params()
        provider = load_provider()
    except (ValueError, TypeError, ValidationError, ImportError, AttributeError) as e:
        logger.error(f"Invalid bot configuration: {e}")
        return 1

    logger.info(
        f"Starting meeting bot: meeting_url={params.meeting_url} "
        f"platform={params.platform.value} session_id={params.session_id}"
    )

    outcome = asyncio.run(run_bot(params, provider))
    reason = outcome.end_reason.value if outcome.end_reason else "unknown"
    if outcome.succeeded:
        logger.info(f"Bot session finished: {reason}")
        return 0

    logger.error(f"Bot session failed: {reason}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
