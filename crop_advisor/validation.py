import logging
from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from crop_advisor.errors import ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_model(model: Type[ModelT], data: Any, message: str = None) -> ModelT:
    """Validate ``data`` into ``model``, translating pydantic errors into ValidationError"""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        logger.warning(f"Rejected {model.__name__}: {[(err['loc'], err['type']) for err in errors]}")
        raise ValidationError(message, details=errors) from e
