"""REST API server for the editor shell: ingestion, edits, preview and export."""
from __future__ import annotations

import logging
import uuid
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from svgmotion.errors import NotFoundError, ParseError, ValidationError
from svgmotion.layer_tree import get_layer
from svgmotion.models import ANIMATABLE_PROPERTIES, DEFAULT_PROPERTIES
from svgmotion.schemas import (
    GroupCreate,
    KeyframeCreate,
    LayerResponse,
    LayerUpdate,
    PreviewResponse,
    PropertyCatalogResponse,
    SelectionUpdate,
    TimelineModel,
    TimelineUpdate,
    WorkspaceCreate,
    WorkspaceResponse,
)
from svgmotion.utils.config import settings
from svgmotion.utils.logging import configure_logging
from svgmotion.workspace import SVG_MEDIA_TYPE, Workspace

logger = logging.getLogger(__name__)

app = FastAPI(title="svgmotion")

# In-memory sessions, keyed by workspace id.
_workspaces: Dict[str, Workspace] = {}


@app.on_event("startup")
def on_startup() -> None:
    configure_logging(settings.log_level)


def _get_workspace(workspace_id: str) -> Workspace:
    workspace = _workspaces.get(workspace_id)
    if workspace is None:
        raise HTTPException(status_code=404, detail=f"Workspace '{workspace_id}' not found")
    return workspace


def _response(workspace_id: str, workspace: Workspace) -> WorkspaceResponse:
    return WorkspaceResponse.build(workspace_id, workspace.tree, workspace.timeline)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/properties", response_model=PropertyCatalogResponse)
def property_catalog():
    return PropertyCatalogResponse(defaults=DEFAULT_PROPERTIES, properties=ANIMATABLE_PROPERTIES)


@app.post("/api/workspaces", response_model=WorkspaceResponse, status_code=201)
def create_workspace(payload: WorkspaceCreate):
    workspace = Workspace(duration=payload.duration)
    try:
        workspace.load(payload.svg)
    except ParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    workspace_id = uuid.uuid4().hex
    _workspaces[workspace_id] = workspace
    logger.info("Created workspace %s with %d layers", workspace_id, len(workspace.tree.layers))
    return _response(workspace_id, workspace)


@app.get("/api/workspaces/{workspace_id}", response_model=WorkspaceResponse)
def read_workspace(workspace_id: str):
    return _response(workspace_id, _get_workspace(workspace_id))


@app.delete("/api/workspaces/{workspace_id}", status_code=204)
def delete_workspace(workspace_id: str):
    _get_workspace(workspace_id)
    del _workspaces[workspace_id]
    return Response(status_code=204)


@app.get("/api/workspaces/{workspace_id}/layers/{layer_id}", response_model=LayerResponse)
def read_layer(workspace_id: str, layer_id: str):
    workspace = _get_workspace(workspace_id)
    try:
        return LayerResponse.from_layer(get_layer(workspace.tree, layer_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.patch("/api/workspaces/{workspace_id}/layers/{layer_id}", response_model=WorkspaceResponse)
def update_layer(workspace_id: str, layer_id: str, payload: LayerUpdate):
    workspace = _get_workspace(workspace_id)
    if payload.name is not None:
        workspace.rename_layer(layer_id, payload.name)
    for key, value in (payload.properties or {}).items():
        workspace.set_property(layer_id, key, value)
    return _response(workspace_id, workspace)


@app.post("/api/workspaces/{workspace_id}/layers/{layer_id}/keyframes", response_model=WorkspaceResponse)
def create_keyframe(workspace_id: str, layer_id: str, payload: KeyframeCreate):
    workspace = _get_workspace(workspace_id)
    try:
        layer = get_layer(workspace.tree, layer_id)
        if payload.time is None and payload.properties is None:
            workspace.capture_keyframe(layer_id)
        else:
            time = workspace.timeline.current_time if payload.time is None else payload.time
            properties = layer.properties if payload.properties is None else payload.properties
            workspace.add_keyframe(layer_id, time, properties)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _response(workspace_id, workspace)


@app.delete("/api/workspaces/{workspace_id}/layers/{layer_id}/keyframes/{keyframe_id}", response_model=WorkspaceResponse)
def delete_keyframe(workspace_id: str, layer_id: str, keyframe_id: str):
    workspace = _get_workspace(workspace_id)
    workspace.remove_keyframe(layer_id, keyframe_id)
    return _response(workspace_id, workspace)


@app.post("/api/workspaces/{workspace_id}/groups", response_model=WorkspaceResponse)
def create_group(workspace_id: str, payload: GroupCreate):
    workspace = _get_workspace(workspace_id)
    try:
        workspace.group_layers(payload.layer_ids, payload.name)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _response(workspace_id, workspace)


@app.delete("/api/workspaces/{workspace_id}/groups/{group_id}", response_model=WorkspaceResponse)
def delete_group(workspace_id: str, group_id: str):
    workspace = _get_workspace(workspace_id)
    workspace.ungroup_layers(group_id)
    return _response(workspace_id, workspace)


@app.post("/api/workspaces/{workspace_id}/selection", response_model=WorkspaceResponse)
def update_selection(workspace_id: str, payload: SelectionUpdate):
    workspace = _get_workspace(workspace_id)
    fields = payload.model_fields_set
    if "selected_id" in fields:
        workspace.select(payload.selected_id)
    if "highlighted_id" in fields:
        workspace.highlight(payload.highlighted_id)
    return _response(workspace_id, workspace)


@app.put("/api/workspaces/{workspace_id}/timeline", response_model=TimelineModel)
def update_timeline(workspace_id: str, payload: TimelineUpdate):
    workspace = _get_workspace(workspace_id)
    if payload.duration is not None:
        workspace.set_duration(payload.duration)
    if payload.current_time is not None:
        workspace.seek(payload.current_time)
    if payload.playing is not None and payload.playing != workspace.timeline.playing:
        workspace.toggle_playback()
    return TimelineModel.from_timeline(workspace.timeline)


@app.get("/api/workspaces/{workspace_id}/preview", response_model=PreviewResponse)
def preview(workspace_id: str, time: Optional[float] = Query(default=None, ge=0)):
    workspace = _get_workspace(workspace_id)
    at = workspace.timeline.current_time if time is None else time
    return PreviewResponse(time=at, svg=workspace.preview(at), state=workspace.resolved_state(at))


@app.get("/api/workspaces/{workspace_id}/export")
def export(workspace_id: str, filename: str = Query(default="animated.svg")):
    workspace = _get_workspace(workspace_id)
    svg_text = workspace.export()
    return Response(
        content=svg_text,
        media_type=SVG_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
