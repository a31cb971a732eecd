"""
FastAPI application for the GCC Explorer.
Provides endpoints for filtering, facet options, charts, saved filter sets
and spreadsheet export over the loaded account/center dataset.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from charts import build_chart_bundle
from config import get_settings
from data_loader import get_data_store, load_data_dir
from defaults import count_active_filters, create_default_filters
from errors import (
    DataLoadError,
    DataNotLoadedError,
    ExportError,
    SavedFilterNotFoundError,
    SavedFilterValidationError,
)
from export import ZIP_MIME_TYPE, build_export_archive, selection_from_filtered
from facets import get_available_options, get_dynamic_revenue_range
from filtering import get_filtered_data
from models import (
    AvailableOptions,
    ChartBundle,
    ConfigResponse,
    DashboardData,
    ExportRequest,
    FilteredData,
    Filters,
    FilterSummaryResponse,
    HealthResponse,
    RangeBounds,
    SavedFilter,
    SavedFilterRequest,
    StatusResponse,
)
from saved_filters import SavedFilterStore


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

saved_filter_store = SavedFilterStore(settings.saved_filters_path)


# ============================================================================
# Application Lifecycle
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load data on startup."""
    data_dir = settings.data_dir
    logger.info("Looking for data at: %s", data_dir)

    if data_dir.is_dir():
        try:
            load_data_dir(data_dir)
        except DataLoadError as exc:
            logger.error("Initial data load failed: %s", exc)
    else:
        logger.warning("Data directory not found at %s", data_dir)
        logger.warning("API will start but data endpoints will fail until data is loaded.")

    yield


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="GCC Explorer API",
    description="Backend API for exploring accounts, centers and prospects",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_data() -> DashboardData:
    try:
        return get_data_store().require_data()
    except DataNotLoadedError:
        raise HTTPException(
            status_code=503,
            detail="Data not loaded. Please ensure the CSV data directory is available.",
        )


def _require_user(user_id: str | None) -> str:
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header.")
    return user_id.strip()


# ============================================================================
# Health Check / Status
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Simple health check endpoint."""
    return HealthResponse(status="ok")


@app.get("/status", response_model=StatusResponse)
async def get_status():
    return get_data_store().status()


# ============================================================================
# Configuration
# ============================================================================

@app.get("/config", response_model=ConfigResponse)
async def get_config():
    """
    Get row counts, autocomplete account names, slider base ranges and the
    default (reset) filter state.
    """
    _require_data()
    store = get_data_store()

    return ConfigResponse(
        row_counts=store.row_counts,
        account_names=store.account_names,
        base_ranges=store.base_ranges,
        default_filters=create_default_filters(store.base_ranges),
    )


# ============================================================================
# Data Management
# ============================================================================

@app.post("/data/reload", response_model=StatusResponse)
async def reload_data():
    """Re-read the CSV directory from the configured location."""
    try:
        store = load_data_dir(settings.data_dir)
    except DataLoadError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    return store.status()


@app.post("/cache/clear", response_model=StatusResponse)
async def clear_cache():
    """Drop the in-memory snapshot and reload it from its last source."""
    store = get_data_store()
    try:
        store.clear_cache()
    except DataNotLoadedError:
        raise HTTPException(status_code=503, detail="Data not loaded.")
    except DataLoadError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    return store.status()


# ============================================================================
# Filters
# ============================================================================

@app.get("/filters/default", response_model=Filters)
async def get_default_filters():
    store = get_data_store()
    return create_default_filters(store.base_ranges if store.is_loaded else None)


@app.post("/filters/summary", response_model=FilterSummaryResponse)
async def get_filter_summary(filters: Filters):
    """Count active filter selections against the dataset's base ranges."""
    store = get_data_store()
    return FilterSummaryResponse(
        active_filter_count=count_active_filters(filters, store.base_ranges if store.is_loaded else None)
    )


@app.post("/filter", response_model=FilteredData)
async def filter_data(filters: Filters):
    """Apply filters across all collections and return the consistent subsets."""
    data = _require_data()
    return get_filtered_data(data, filters)


@app.post("/options", response_model=AvailableOptions)
async def available_options(filters: Filters):
    """Leave-one-out facet counts for every categorical filter."""
    data = _require_data()
    return get_available_options(data, filters)


@app.post("/revenue-range", response_model=RangeBounds)
async def revenue_range(filters: Filters):
    """Revenue slider bounds given every other account filter."""
    data = _require_data()
    return get_dynamic_revenue_range(data.accounts, filters)


@app.post("/charts", response_model=ChartBundle)
async def chart_data(filters: Filters):
    data = _require_data()
    filtered = get_filtered_data(data, filters)
    return build_chart_bundle(filtered, data.tech)


# ============================================================================
# Saved Filters
# ============================================================================

@app.get("/saved-filters", response_model=list[SavedFilter])
async def list_saved_filters(x_user_id: str | None = Header(default=None)):
    user_id = _require_user(x_user_id)
    return saved_filter_store.list_filters(user_id)


@app.get("/saved-filters/{filter_id}", response_model=SavedFilter)
async def get_saved_filter(filter_id: int, x_user_id: str | None = Header(default=None)):
    user_id = _require_user(x_user_id)
    try:
        return saved_filter_store.get_filter(user_id, filter_id)
    except SavedFilterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)


@app.post("/saved-filters", response_model=SavedFilter, status_code=201)
async def create_saved_filter(request: SavedFilterRequest, x_user_id: str | None = Header(default=None)):
    user_id = _require_user(x_user_id)
    try:
        return saved_filter_store.save_filter(user_id, request.name, request.filters)
    except SavedFilterValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)


@app.put("/saved-filters/{filter_id}", response_model=SavedFilter)
async def update_saved_filter(
    filter_id: int,
    request: SavedFilterRequest,
    x_user_id: str | None = Header(default=None),
):
    user_id = _require_user(x_user_id)
    try:
        return saved_filter_store.update_filter(user_id, filter_id, request.name, request.filters)
    except SavedFilterValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except SavedFilterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)


@app.delete("/saved-filters/{filter_id}", response_model=SavedFilter)
async def delete_saved_filter(filter_id: int, x_user_id: str | None = Header(default=None)):
    user_id = _require_user(x_user_id)
    try:
        return saved_filter_store.delete_filter(user_id, filter_id)
    except SavedFilterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)


# ============================================================================
# Export
# ============================================================================

@app.post("/export")
async def export_data(request: ExportRequest):
    """
    Export the filtered view as `<base>.xlsx` inside `<base>.zip`.
    One sheet per requested dataset.
    """
    data = _require_data()
    filtered = get_filtered_data(data, request.filters)
    selection = selection_from_filtered(filtered, request.datasets)

    try:
        filename, content = build_export_archive(selection, request.filename_base)
    except ExportError as exc:
        raise HTTPException(status_code=400, detail=exc.message)

    return Response(
        content=content,
        media_type=ZIP_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
