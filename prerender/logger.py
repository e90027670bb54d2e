import logging
import sys
from datetime import datetime

from prerender.config import LOG_FILE, LOG_LEVEL


class CompanyFormatter(logging.Formatter):
    """
    [ Tue Jan 06 05:32:41 AM UTC 2026 ] : INFO : http://localhost:8000/cart.html : [SSR] Rendered ...

    The third column is the URL being rendered when the call site passes
    extra={"context": url}; otherwise the last segment of the logger name
    (engine, server, output).
    """
    def format(self, record):
        stamp = datetime.fromtimestamp(record.created).strftime("%a %b %d %I:%M:%S %p UTC %Y")
        context = getattr(record, 'context', record.name.rsplit('.', 1)[-1])
        line = f"[ {stamp} ] : {record.levelname} : {context} : {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logger(name="prerender", log_file=None, level=LOG_LEVEL):
    """
    Returns the named logger. Only the 'prerender' root logger owns handlers;
    module loggers ('prerender.engine', ...) propagate to it.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if name != "prerender":
        logger.propagate = True
        setup_logger("prerender", log_file=log_file or LOG_FILE, level=level)
        return logger

    if logger.handlers:
        return logger

    formatter = CompanyFormatter()
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger

