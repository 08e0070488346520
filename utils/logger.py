# utils/logger.py

import asyncio
import logging
import sys
import threading

from app.config import LOG_FORMAT, LOG_LEVEL

logger = logging.getLogger("forex_mcp")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
logger.setLevel(LOG_LEVEL)


def _log_uncaught(exc_type, exc_value, exc_tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_tb))


def _log_thread_exception(args):
    logger.critical(
        f"Uncaught exception in thread {args.thread.name if args.thread else '?'}",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )


def _log_loop_exception(loop, context):
    exc = context.get("exception")
    message = context.get("message", "Unhandled error in event loop")
    if exc is not None:
        logger.error(f"Unhandled rejection: {message}", exc_info=exc)
    else:
        logger.error(f"Unhandled rejection: {message}")


def install_crash_guards(loop: asyncio.AbstractEventLoop = None):
    """
    처리되지 않은 예외가 프로세스를 종료시키지 않도록 모두 로거로 보낸다.
    loop 가 주어지면 asyncio 태스크의 미처리 예외도 기록한다.
    """
    sys.excepthook = _log_uncaught
    threading.excepthook = _log_thread_exception
    if loop is not None:
        loop.set_exception_handler(_log_loop_exception)
