"""Component config API routes.

Assembles the UI payload for one view block of a model's view config:
component sections plus optional top-level headers, filters and pagination.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query

from uiapi.components.registry import canonical_kind
from uiapi.engine.assembler import get_assembler, parse_columns_param
from uiapi.errors import ConfigurationError, UiApiError
from uiapi.schema.registry import get_schema_registry
from uiapi.views.registry import get_view_config_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ccs", tags=["component-configs"])


def _assemble(
    model: str,
    component: str,
    columns: Optional[str],
    component_settings: Optional[str],
    lang: Optional[str],
    per_page: Optional[int],
    page: Optional[int],
) -> dict[str, Any]:
    try:
        block = get_view_config_registry().get_block(model, component)
        schema = None if block.no_model else get_schema_registry().get_snapshot(model)
        result = get_assembler().assemble(
            block,
            parse_columns_param(component_settings),
            schema,
            lang,
            per_page,
            page,
            model=model,
            block_name=component,
            columns=parse_columns_param(columns),
        )
    except ConfigurationError as e:
        logger.warning(f"Cannot assemble {model}/{component}: {e}")
        raise HTTPException(status_code=422, detail=e.to_detail())
    except UiApiError as e:
        logger.warning(f"Cannot assemble {model}/{component}: {e}")
        raise HTTPException(status_code=422, detail={"error": str(e)})

    if "message" in result:
        return result

    response: dict[str, Any] = {
        "component": canonical_kind(component),
        "componentSettings": result["componentSettings"],
    }
    for extra in ("headers", "filters", "pagination"):
        if extra in result:
            response[extra] = result[extra]
    return response


# ── Assembly ─────────────────────────────────────────────────────────────

@router.get("/{model}")
async def get_component_config(
    model: str,
    component: Optional[str] = Query(None, description="View block name, e.g. listView"),
    columns: Optional[str] = Query(None, description="Comma-separated columns override"),
    component_settings: Optional[str] = Query(
        None, alias="componentSettings", description="Comma-separated component subset"
    ),
    lang: Optional[str] = Query(None),
    per_page: Optional[int] = Query(None, gt=0),
    page: Optional[int] = Query(None, gt=0),
):
    """Assemble a view block selected by the `component` query parameter."""
    if not component:
        raise HTTPException(status_code=422, detail={"error": "component parameter is required"})
    return _assemble(model, component, columns, component_settings, lang, per_page, page)


@router.get("/{model}/{component}")
async def get_component_config_by_path(
    model: str,
    component: str,
    columns: Optional[str] = Query(None),
    component_settings: Optional[str] = Query(None, alias="componentSettings"),
    lang: Optional[str] = Query(None),
    per_page: Optional[int] = Query(None, gt=0),
    page: Optional[int] = Query(None, gt=0),
):
    """Assemble a view block named in the path."""
    return _assemble(model, component, columns, component_settings, lang, per_page, page)
