import os
import logging
import pytz
from datetime import datetime

class TimezoneFormatter(logging.Formatter):
    def __init__(self, fmt=None, datefmt=None, timezone_name='UTC'):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.timezone = pytz.timezone(timezone_name)

    def formatTime(self, record, datefmt=None):
        # Convert the timestamp to the configured zone
        record_time = datetime.fromtimestamp(record.created, self.timezone)
        return record_time.strftime(datefmt) if datefmt else record_time.isoformat()

def setup_logging(timezone_name=None):
    logger = logging.getLogger()
    if not logger.handlers:
        formatter = TimezoneFormatter(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            timezone_name=timezone_name or os.environ.get('LOG_TIMEZONE', 'UTC')
        )

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        logger.setLevel(logging.INFO)
        logger.addHandler(handler)

    return logger
