"""
Mapping between stored documents and validated models.

Everything read from a backend passes through parse_document, so a
malformed document is rejected here instead of deep inside a service.
"""

from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .exceptions import DocumentError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_document(model: Type[ModelT], document: Optional[Dict[str, Any]]) -> Optional[ModelT]:
    """
    Validate a stored document against its model.

    Args:
        model: Pydantic model class
        document: Raw document, or None

    Returns:
        Model instance, or None when document is None

    Raises:
        DocumentError: If the document does not match the model
    """
    if document is None:
        return None
    try:
        return model.model_validate(document)
    except ValidationError as e:
        raise DocumentError(
            f"Malformed {model.__name__} document: {e.error_count()} validation error(s)"
        ) from e


def to_document(instance: BaseModel) -> Dict[str, Any]:
    """Serialize a model into a JSON-safe document with camelCase keys."""
    return instance.model_dump(by_alias=True, mode="json")
