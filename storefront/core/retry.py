# storefront/core/retry.py
import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.core.config import get_settings
from storefront.core.errors import ConflictError

settings = get_settings()
logger = logging.getLogger(__name__)


def conflict_retry():
    """
    Re-run a whole unit of work when it lost an optimistic-lock race.

    The wrapped operation must re-read everything it writes: the failed
    attempt has already been rolled back by unit_of_work().
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(settings.CART_CONFLICT_RETRIES),
        wait=wait_exponential(multiplier=0.02, min=0.02, max=0.5),
        retry=retry_if_exception_type(ConflictError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
