"""
Configuration du logging
Installe les handlers du logger racine pour les scripts et la CLI.
"""
import logging
import sys


def setup_logging(level=logging.INFO, log_file=None):
    """
    Configure le logger racine.

    Args:
        level: niveau de logging (logging.DEBUG, logging.INFO...)
        log_file: chemin optionnel d'un fichier de log
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Évite les doublons si la CLI est relancée dans le même process
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialisé.")
