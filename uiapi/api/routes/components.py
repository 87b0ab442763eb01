"""Component template API routes."""

from fastapi import APIRouter, HTTPException

from uiapi.components.registry import get_template_registry
from uiapi.components.schemas import ComponentSummary, ComponentTemplate

router = APIRouter(prefix="/components", tags=["components"])


@router.get("", response_model=list[ComponentSummary])
async def list_components():
    """List all component templates (summaries)."""
    return get_template_registry().list_summaries()


@router.get("/{component_key}", response_model=ComponentTemplate)
async def get_component(component_key: str):
    """Get a component template; numeric suffixes resolve to the base kind."""
    template = get_template_registry().get(component_key)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Component '{component_key}' not found")
    return template
