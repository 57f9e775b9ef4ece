import copy
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGS_DIR = Path("logs")
LOGS_DIR.mkdir(exist_ok=True)


class ColoredFormatter(logging.Formatter):
    """Coloured level names for the terminal"""

    COLORS = {
        'DEBUG': '\033[36m',  # cyan
        'INFO': '\033[32m',  # green
        'WARNING': '\033[33m',  # yellow
        'ERROR': '\033[31m',  # red
        'CRITICAL': '\033[35m',  # magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        # the file handler shares the record, colour a copy only
        record = copy.copy(record)
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{log_color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def setup_logger(
        name: str,
        log_file: str = None,
        level: int = logging.DEBUG,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
) -> logging.Logger:
    """
    Configure a logger writing to the console and, optionally, to a rotating file.

    Args:
        name: logger name
        log_file: file name under logs/ (console only when None)
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        max_bytes: size of the log file before it is rotated
        backup_count: number of rotated files to keep
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    log_format = '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(log_format, datefmt=date_format))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            LOGS_DIR / log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        logger.addHandler(file_handler)

    return logger


class DatabaseLogger:
    """Logging for database writes"""

    def __init__(self, logger_name: str = "database"):
        self.logger = setup_logger(
            name=logger_name,
            log_file=f"{logger_name}.log"
        )

    def log_create(self, model_name: str, data: dict):
        self.logger.info(
            f"CREATE {model_name}:\n{json.dumps(data, ensure_ascii=False, indent=2, default=str)}"
        )

    def log_update(self, model_name: str, record_id: int, changes: dict):
        self.logger.info(
            f"UPDATE {model_name} (id={record_id}):\n"
            f"{json.dumps(changes, ensure_ascii=False, indent=2, default=str)}"
        )

    def log_delete(self, model_name: str, record_id: int):
        self.logger.warning(f"DELETE {model_name} (id={record_id})")

    def log_error(self, operation: str, error: Exception):
        self.logger.error(
            f"DB ERROR in {operation}:\n"
            f"Error Type: {type(error).__name__}\n"
            f"Error Message: {str(error)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )


class WebSocketLogger:
    """Logging for tower notebook websockets"""

    def __init__(self, logger_name: str = "websocket"):
        self.logger = setup_logger(
            name=logger_name,
            log_file=f"{logger_name}.log"
        )

    def log_connect(self, student_name: str, tower_id: int):
        self.logger.info(f"🔗 CONNECT: student={student_name}, tower={tower_id}")

    def log_disconnect(self, student_name: str, tower_id: int):
        self.logger.info(f"🔌 DISCONNECT: student={student_name}, tower={tower_id}")

    def log_message(self, action: str, data: dict):
        self.logger.debug(
            f"📩 MESSAGE: action={action}\n{json.dumps(data, ensure_ascii=False, indent=2, default=str)}"
        )

    def log_broadcast(self, tower_id: int, message_type: str):
        self.logger.debug(f"📡 BROADCAST: tower={tower_id}, type={message_type}")

    def log_error(self, context: str, error: Exception):
        self.logger.error(
            f"❌ WS ERROR in {context}:\n"
            f"Error Type: {type(error).__name__}\n"
            f"Error Message: {str(error)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )


class AILogger:
    """Logging for inference requests"""

    def __init__(self, logger_name: str = "ai"):
        self.logger = setup_logger(
            name=logger_name,
            log_file=f"{logger_name}.log"
        )

    def log_request(self, tower_id, student_name: str, sources: int, grade_level: str):
        self.logger.info(
            f"🤖 REQUEST: tower={tower_id}, student={student_name}, "
            f"sources={sources}, grade={grade_level}"
        )

    def log_usage(self, tower_id, prompt_tokens: int, response_tokens: int, cost: float):
        self.logger.debug(
            f"📊 USAGE: tower={tower_id}, prompt={prompt_tokens}, "
            f"response={response_tokens}, cost={cost:.6f}"
        )

    def log_error(self, context: str, error: Exception):
        self.logger.error(
            f"❌ AI ERROR in {context}:\n"
            f"Error Type: {type(error).__name__}\n"
            f"Error Message: {str(error)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )


db_logger = DatabaseLogger()
ws_logger = WebSocketLogger()
ai_logger = AILogger()
app_logger = setup_logger("app", "app.log")
