import logging
from sqlalchemy.orm import Session


class BaseService:
    """
    Common plumbing for service classes: the request session and a
    per-class logger.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)
