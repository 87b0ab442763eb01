"""UI API - View Config Assembly Service.

This API assembles UI payloads from declarative view configs:
- Component templates (table, form, toolbar, filterSection, meta)
- Model schemas (column definitions per model)
- View configs (view blocks with overrides and column customizations)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uiapi.api.routes import component_configs, components, view_configs
from uiapi.components.registry import get_template_registry
from uiapi.engine.assembler import get_assembler
from uiapi.schema.registry import get_schema_registry
from uiapi.settings import get_settings
from uiapi.views.registry import get_view_config_registry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()
if not settings.logging_enabled:
    logging.getLogger("uiapi").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: Pre-load all registries
    logger.info("Loading component templates...")
    template_registry = get_template_registry()
    logger.info(f"Loaded {template_registry.count()} component templates")

    logger.info("Loading model schemas...")
    schema_registry = get_schema_registry()
    logger.info(f"Loaded {schema_registry.count()} model schemas")

    logger.info("Loading view configs...")
    view_registry = get_view_config_registry()
    logger.info(f"Loaded {view_registry.count()} view configs")

    get_assembler()
    logger.info("UI API ready")
    yield
    # Shutdown
    logger.info("Shutting down UI API")


# Create FastAPI app
app = FastAPI(
    title="UI API",
    description="""
## View Config Assembly Service

Turns a declarative view config plus a model schema into an assembled UI
payload (headers, filters, form fields, toolbar, metadata).

### Key Endpoints

- `GET /api/ccs/{model}?component={block}` - Assemble a view block
- `GET /api/ccs/{model}/{block}` - Assemble a view block (path form)
- `GET /api/view-configs` - List view configs
- `GET /api/view-configs/{model}/validate` - Validate a view config
- `GET /api/components` - List component templates
""",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

prefix = f"/{settings.route_prefix.strip('/')}"
app.include_router(component_configs.router, prefix=prefix)
app.include_router(view_configs.router, prefix=prefix)
app.include_router(components.router, prefix=prefix)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "UI API",
        "version": "0.1.0",
        "description": "View config assembly service",
        "docs": "/docs",
        "endpoints": {
            "component_configs": f"{prefix}/ccs/{{model}}/{{block}}",
            "view_configs": f"{prefix}/view-configs",
            "components": f"{prefix}/components",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "components_loaded": get_template_registry().count(),
        "schemas_loaded": get_schema_registry().count(),
        "view_configs_loaded": get_view_config_registry().count(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
