# catalog_sync/utils/attempts.py
from typing import Callable, Sequence

from tenacity import Retrying, stop_after_attempt, wait_none, retry_if_exception

from ..errors import DownstreamRequestError
from .logger import warn

# statuses that mean "this payload shape was rejected", worth trying the next variant
SHAPE_REJECTIONS = (400, 422)


def _shape_rejected(exc: BaseException) -> bool:
    return isinstance(exc, DownstreamRequestError) and exc.status in SHAPE_REJECTIONS


def try_variants(builders: Sequence[Callable], ctx, call: Callable, label: str = "payload"):
    """
    Build a payload with each builder in order and hand it to `call` until one is accepted.
    Returns (response, variant_index). The last error is re-raised if every variant fails.
    """
    if not builders:
        raise ValueError("no payload variants")

    for attempt in Retrying(
        reraise=True,
        stop=stop_after_attempt(len(builders)),
        wait=wait_none(),
        retry=retry_if_exception(_shape_rejected),
    ):
        with attempt:
            idx = attempt.retry_state.attempt_number - 1
            if idx:
                warn(f"[{label}] variant {idx} rejected, trying variant {idx + 1}")
            return call(builders[idx](ctx)), idx
