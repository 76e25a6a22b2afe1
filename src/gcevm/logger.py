import logging
import os

from rich.logging import RichHandler

from . import actions


class AnnotationHandler(logging.Handler):
    """
    Repeats warnings and errors as workflow commands so they are shown as
    annotations on the run summary, not only in the step log.
    """

    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            command = "error" if record.levelno >= logging.ERROR else "warning"
            actions.issue_command(command, self.format(record))
        except Exception:
            self.handleError(record)


def on_runner() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def default_level() -> int:
    # The runner sets RUNNER_DEBUG=1 when step debug logging is enabled
    return logging.DEBUG if os.environ.get("RUNNER_DEBUG") == "1" else logging.INFO


def setup_logger(
    name: str = "gcevm", level: int = logging.INFO, annotate: bool | None = None
) -> logging.Logger:
    """
    Configures a logger with RichHandler for the step log, plus annotations
    when running on a GitHub runner (or when annotate is set).
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # setup may run more than once per process (tests, repeated main calls)
    if logger.handlers:
        return logger

    handler = RichHandler(rich_tracebacks=True, markup=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    if on_runner() if annotate is None else annotate:
        annotations = AnnotationHandler()
        annotations.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(annotations)

    return logger


logger = setup_logger(level=default_level())
