"""View config API routes."""

from typing import Any

from fastapi import APIRouter, HTTPException

from uiapi.components.registry import get_template_registry
from uiapi.errors import ModelSchemaNotFoundError
from uiapi.schema.registry import get_schema_registry
from uiapi.views.registry import get_view_config_registry
from uiapi.views.schemas import ValidationReport, ViewConfigSummary
from uiapi.views.validator import ViewConfigValidator

router = APIRouter(prefix="/view-configs", tags=["view-configs"])


@router.get("", response_model=list[ViewConfigSummary])
async def list_view_configs():
    """List all view configs with their block names."""
    return get_view_config_registry().list_summaries()


@router.get("/{model}")
async def get_view_config(model: str) -> dict[str, Any]:
    """Get the raw view config document for a model."""
    document = get_view_config_registry().get_document(model)
    if document is None:
        raise HTTPException(status_code=404, detail=f"View config for '{model}' not found")
    return document


@router.get("/{model}/validate", response_model=ValidationReport)
async def validate_view_config(model: str):
    """Validate a model's view config against its schema and the templates."""
    document = get_view_config_registry().get_document(model)
    if document is None:
        raise HTTPException(status_code=404, detail=f"View config for '{model}' not found")

    try:
        schema_columns = get_schema_registry().get_snapshot(model)
    except ModelSchemaNotFoundError:
        schema_columns = None

    validator = ViewConfigValidator(get_template_registry().list_kinds())
    return validator.validate(document, model, schema_columns)
