"""Validation layer between the row repairer and the reporter.

Validates record dicts against Pydantic models and drops failures with
an error log, so one bad row never takes down the report.

Usage::

    from superchat.validation import validate_batch
    from superchat.models import SuperchatRecord

    records, dropped = validate_batch(dicts, SuperchatRecord, {"url": url})
"""

import logging
import warnings

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


def validate_record(
    data: dict,
    model_cls: type[BaseModel],
    context: dict,
) -> BaseModel | None:
    """Validate a dict against a Pydantic model.

    Args:
        data: Dict of field values to validate.
        model_cls: Pydantic model class (e.g. SuperchatRecord).
        context: Dict with ``url`` (and optionally ``index``) for logging.

    Returns:
        The model instance on success, or ``None`` if validation failed.
    """
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            model = model_cls.model_validate(data)

        for w in caught:
            logger.warning(
                "Validation warning for %s (%s, record %s): %s",
                model_cls.__name__,
                context.get("url"),
                context.get("index"),
                w.message,
            )

        return model

    except ValidationError as e:
        logger.error(
            "Validation failed for %s (%s, record %s): %s",
            model_cls.__name__,
            context.get("url"),
            context.get("index"),
            e,
        )
        return None


def validate_batch(
    items: list[dict],
    model_cls: type[BaseModel],
    context: dict,
) -> tuple[list[BaseModel], int]:
    """Validate a list of dicts, returning valid models and the drop count."""
    valid: list[BaseModel] = []
    dropped = 0

    for index, item in enumerate(items):
        result = validate_record(item, model_cls, {**context, "index": index})
        if result is not None:
            valid.append(result)
        else:
            dropped += 1

    return valid, dropped
