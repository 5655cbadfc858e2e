"""
Process-wide failure observers.

These hooks log (and report to Sentry) failures that escape every handler:

- uncaught exceptions on the main thread (`sys.excepthook`)
- uncaught exceptions in other threads (`threading.excepthook`)
- failed asyncio tasks nobody awaited, and other event loop errors

They only observe. They never exit or restart the process; supervision is
left to whatever runs the server (systemd, a container runtime, ...).
"""
import asyncio
import sys
import threading
from typing import Any, Dict

from ciudadano_digital.config.sentry import capture_exception
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)


def _log_uncaught_exception(exc_type, exc_value, exc_traceback) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger.error(
        "Uncaught exception",
        error=str(exc_value),
        error_type=exc_type.__name__,
        exc_info=(exc_type, exc_value, exc_traceback),
    )
    capture_exception(exc_value, tags={"hook": "uncaught_exception"})


def _log_thread_exception(args: threading.ExceptHookArgs) -> None:
    if args.exc_type is SystemExit:
        return

    thread_name = args.thread.name if args.thread is not None else None
    logger.error(
        "Uncaught exception in thread",
        thread=thread_name,
        error=str(args.exc_value),
        error_type=args.exc_type.__name__,
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )
    if args.exc_value is not None:
        capture_exception(args.exc_value, tags={"hook": "thread_exception"})


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    """Event loop exception handler for unhandled task failures."""
    exception = context.get("exception")
    logger.error(
        "Unhandled asyncio error",
        message=context.get("message"),
        error=str(exception) if exception is not None else None,
        error_type=type(exception).__name__ if exception is not None else None,
        exc_info=exception,
    )
    if exception is not None:
        capture_exception(exception, tags={"hook": "unhandled_rejection"})


def install_process_hooks() -> None:
    """Register the uncaught exception observers for the interpreter."""
    sys.excepthook = _log_uncaught_exception
    threading.excepthook = _log_thread_exception
    logger.debug("Process exception hooks installed")


def install_loop_exception_handler(loop: asyncio.AbstractEventLoop) -> None:
    """Register the unhandled task observer on a running event loop."""
    loop.set_exception_handler(handle_loop_exception)
    logger.debug("Event loop exception handler installed")
