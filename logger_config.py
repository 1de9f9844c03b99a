# logger_config.py
import logging
import os
import sys

LOGGER_NAME = 'variant_guard'


def setup_logger():
    """Configura el logger compartido del validador."""
    # Evita añadir múltiples handlers si la función se llama más de una vez
    if logging.getLogger(LOGGER_NAME).hasHandlers():
        return logging.getLogger(LOGGER_NAME)

    logger = logging.getLogger(LOGGER_NAME)
    level_name = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Handler para enviar los logs a la consola
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(stream_handler)
    return logger

# Instancia compartida, importada por el resto de módulos
logger = setup_logger()


def setup_diagnostics_logger(stream=None):
    """Activa el logger 'diagnostics' (eventos estructurados) en INFO hacia stderr."""
    diag = logging.getLogger('diagnostics')
    if diag.handlers:
        return diag
    diag.setLevel(logging.INFO)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    diag.addHandler(handler)
    return diag
