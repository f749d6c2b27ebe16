import logging
import sys
from pythonjsonlogger import jsonlogger

class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            # ISO 8601 would need formatting; epoch seconds are enough for ingestion
            log_record['timestamp'] = record.created
        if log_record.get('level'):
            log_record['level'] = log_record['level'].upper()
        else:
            log_record['level'] = record.levelname

        log_record['module'] = record.module
        log_record['lineno'] = record.lineno


PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _is_engine_handler(handler: logging.Handler) -> bool:
    return getattr(handler, "_assessment_engine", False)


def setup_logging(log_level_str: str = "INFO", json_output: bool = True) -> logging.Logger:
    """
    Configures logging for the application: structured JSON on stdout by default,
    the plain basicConfig format otherwise. Safe to call more than once.
    """
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(_is_engine_handler(h) for h in root_logger.handlers):
        root_logger.info(f"Logging already configured. Current level: {logging.getLevelName(root_logger.getEffectiveLevel())}")
        return root_logger

    log_handler = logging.StreamHandler(sys.stdout)
    if json_output:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(module)s %(lineno)d %(message)s')
    else:
        formatter = logging.Formatter(PLAIN_FORMAT)
    log_handler.setFormatter(formatter)
    log_handler._assessment_engine = True
    root_logger.addHandler(log_handler)
    root_logger.info(f"Logging configured with level: {logging.getLevelName(log_level)}")
    return root_logger
