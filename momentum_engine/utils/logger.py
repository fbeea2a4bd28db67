import logging
import logging.config

from momentum_engine.config import EngineConfig

def setup_logger(config: EngineConfig) -> logging.Logger:
    if config.logging.to_file:
        config.logging.log_dir.mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(config.get_logging_config())
    logger = logging.getLogger("momentum_engine")
    logger.debug("Логирование настроено: %s", config.logging.level.value)
    return logger
