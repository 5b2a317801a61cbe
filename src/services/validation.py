from typing import TypeVar

from pydantic import BaseModel, ValidationError

from src.utils.errors import InvalidInputError

M = TypeVar("M", bound=BaseModel)


def validate_input(model: type[M], **data) -> M:
    """Build a model from user input, turning pydantic errors into InvalidInputError."""
    try:
        return model(**data)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidInputError(f"Invalid {model.__name__}: {message}", fields) from e
