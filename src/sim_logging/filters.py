"""Log filters for default context fields."""

import logging


class DefaultCorrelationFilter(logging.Filter):
    """Adds a placeholder correlation_id so text formats never break."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True
