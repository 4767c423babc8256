"""Universe view endpoints.

Stateless: every request carries the graph and a state snapshot, and the
response is the settled derived view.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from dreamverse.models import ElementGraph
from dreamverse.universe import SemanticClassifier, UniverseEngine, format_date_range, time_slice_presets

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/universe")


# ============================================================================
# Models
# ============================================================================


class ViewRequest(BaseModel):
    """Graph payload plus the state to derive a view for."""

    graph: dict
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    expanded_nebula_ids: list[str] = []
    focused_node_id: str | None = None
    zoom_scale: float = Field(default=1.0, gt=0)
    time_slice_index: int | None = None  # preset index, default preset when omitted
    show_all_time: bool = False
    now: datetime | None = None  # end of the preset windows


class TimeSliceInfo(BaseModel):
    """One entry of the time-slice preset catalog."""

    index: int
    label: str
    start_date: datetime
    end_date: datetime
    range_label: str


def get_classifier(request: Request) -> SemanticClassifier:
    """Get the category classifier from app state."""
    classifier = getattr(request.app.state, "classifier", None)
    return classifier or SemanticClassifier()


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/categories")
async def get_categories(request: Request) -> dict:
    """Semantic category table (label, color, icon, keywords)."""
    return get_classifier(request).to_dict()


@router.get("/time-slices", response_model=list[TimeSliceInfo])
async def get_time_slices(now: datetime | None = None) -> list[TimeSliceInfo]:
    """Time-slice preset catalog ending at `now`."""
    return [
        TimeSliceInfo(
            index=i,
            label=preset.label,
            start_date=preset.start_date,
            end_date=preset.end_date,
            range_label=format_date_range(preset.start_date, preset.end_date),
        )
        for i, preset in enumerate(time_slice_presets(now))
    ]


@router.post("/view")
async def post_view(body: ViewRequest, request: Request) -> dict:
    """Derive the settled universe view for a graph and state snapshot."""
    try:
        graph = ElementGraph.from_dict(body.graph)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid graph payload: {e}")

    engine = UniverseEngine.from_graph(
        graph,
        width=body.width,
        height=body.height,
        classifier=get_classifier(request),
        now=body.now,
    )

    if body.time_slice_index is not None:
        presets = engine.time_slice_presets()
        if not 0 <= body.time_slice_index < len(presets):
            raise HTTPException(
                status_code=400,
                detail=f"time_slice_index must be in [0, {len(presets) - 1}]",
            )
        engine.set_time_slice(presets[body.time_slice_index])
    if body.show_all_time:
        engine.toggle_all_time()

    # click_nebula toggles, so each id is replayed once
    for nebula_id in dict.fromkeys(body.expanded_nebula_ids):
        engine.click_nebula(nebula_id)
    if body.zoom_scale != 1.0:
        engine.zoom_to(body.zoom_scale)

    for _ in engine.settle():
        pass
    if body.focused_node_id:
        engine.click_node(body.focused_node_id)

    view = engine.view()
    logger.debug(
        f"View for {len(graph.nodes)} nodes: {len(view.nebulae)} nebulae, {len(view.nodes)} stars"
    )
    return view.to_dict()
