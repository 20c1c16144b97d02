import logging
from typing import Any, MutableMapping

# Уровни исходной CLI: --trace (тоньше DEBUG) и --verbose (между DEBUG и INFO)
TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "verbose": VERBOSE,
    "debug": logging.DEBUG,
    "trace": TRACE,
}


def setup_logger(level: int = logging.INFO) -> logging.Logger:
    """
    Создаёт и настраивает корневой логгер проекта ``dkmeans``.

    :param level: минимальный уровень логирования
    :return: настроенный экземпляр :class:`logging.Logger`
    """
    logger = logging.getLogger("dkmeans")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Чтобы сообщения не дублировались через root-логгер
    logger.propagate = False

    return logger


class NodeLoggerAdapter(logging.LoggerAdapter):
    """Добавляет метку узла (``Root 0``/``Node 2``) к каждому сообщению."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self.extra['node']}: {msg}", kwargs


def node_label(rank: int, is_root: bool) -> str:
    return f"Root {rank}" if is_root else f"Node {rank}"


def node_logger(logger: logging.Logger | None, label: str) -> NodeLoggerAdapter:
    """Логгер узла с префиксом; без базового логгера берётся ``dkmeans``."""
    return NodeLoggerAdapter(logger or logging.getLogger("dkmeans"), {"node": label})
