# auth_sdk/logging_config.py
import logging
import sys

# Определяем имя базового логгера для всего SDK
SDK_LOGGER_NAME = "auth_sdk"
SDK_HANDLER_NAME = "auth_sdk.console"


def setup_sdk_logging(
    level=logging.INFO,
    log_format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    propagate: bool = True,
):
    """
    Настраивает базовый логгер SDK.
    propagate=False отключает передачу записей корневому логгеру, чтобы
    при logging.basicConfig в приложении строки не дублировались.
    """
    logger = logging.getLogger(SDK_LOGGER_NAME)

    # Повторный вызов не добавляет второй консольный обработчик.
    # Чужие обработчики (например, захват логов pytest) не учитываются.
    if any(h.get_name() == SDK_HANDLER_NAME for h in logger.handlers):
        logger.debug(f"Logger '{SDK_LOGGER_NAME}' is already configured. Skipping setup.")
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(SDK_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(handler)
    logger.propagate = propagate

    logger.info(
        f"SDK Logging setup complete for '{SDK_LOGGER_NAME}' at level {logging.getLevelName(level)}"
    )
    return logger
