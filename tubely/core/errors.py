import logging
from typing import NoReturn, Optional

from fastapi import HTTPException

logger = logging.getLogger("errors")


def fail(status_code: int, message: str, err: Optional[BaseException] = None, **extra) -> NoReturn:
    """Loga o detalhe interno e encerra a requisição com o envelope padrão do FastAPI."""
    if status_code >= 500:
        logger.error("%s: %s", message, err, exc_info=err, extra=extra)
    else:
        logger.warning("%s: %s", message, err or "-", extra=extra)
    raise HTTPException(status_code=status_code, detail=message)
