"""Pydantic schemas for API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from svgmotion.layer_tree import LayerTree
from svgmotion.models import Keyframe, Layer
from svgmotion.timeline import Timeline


class KeyframeResponse(BaseModel):
    id: str
    time: float
    properties: Dict[str, Any]

    @classmethod
    def from_keyframe(cls, keyframe: Keyframe) -> "KeyframeResponse":
        return cls(id=keyframe.id, time=keyframe.time, properties=dict(keyframe.properties))


class LayerResponse(BaseModel):
    id: str
    name: str
    kind: str
    path_data: Optional[str] = None
    properties: Dict[str, Any]
    keyframes: List[KeyframeResponse]
    children: List["LayerResponse"] = Field(default_factory=list)
    is_selected: bool
    is_highlighted: bool

    @classmethod
    def from_layer(cls, layer: Layer) -> "LayerResponse":
        return cls(
            id=layer.id,
            name=layer.name,
            kind=layer.kind.value,
            path_data=layer.path_data,
            properties=dict(layer.properties),
            keyframes=[KeyframeResponse.from_keyframe(kf) for kf in layer.keyframes],
            children=[cls.from_layer(child) for child in layer.children],
            is_selected=layer.is_selected,
            is_highlighted=layer.is_highlighted,
        )


class TimelineModel(BaseModel):
    duration: float = Field(gt=0)
    current_time: float = Field(ge=0)
    playing: bool = False

    @classmethod
    def from_timeline(cls, timeline: Timeline) -> "TimelineModel":
        return cls(duration=timeline.duration, current_time=timeline.current_time, playing=timeline.playing)


class WorkspaceCreate(BaseModel):
    svg: str
    duration: Optional[float] = Field(default=None, gt=0)


class WorkspaceResponse(BaseModel):
    workspace_id: str
    version: int
    selected_id: Optional[str]
    highlighted_id: Optional[str]
    layers: List[LayerResponse]
    timeline: TimelineModel

    @classmethod
    def build(cls, workspace_id: str, tree: LayerTree, timeline: Timeline) -> "WorkspaceResponse":
        return cls(
            workspace_id=workspace_id,
            version=tree.version,
            selected_id=tree.selected_id,
            highlighted_id=tree.highlighted_id,
            layers=[LayerResponse.from_layer(layer) for layer in tree.layers],
            timeline=TimelineModel.from_timeline(timeline),
        )


class LayerUpdate(BaseModel):
    name: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class KeyframeCreate(BaseModel):
    # Omitted time/properties capture the layer at the playhead.
    time: Optional[float] = Field(default=None, ge=0)
    properties: Optional[Dict[str, Any]] = None


class GroupCreate(BaseModel):
    layer_ids: List[str]
    name: str


class SelectionUpdate(BaseModel):
    selected_id: Optional[str] = None
    highlighted_id: Optional[str] = None


class TimelineUpdate(BaseModel):
    duration: Optional[float] = Field(default=None, gt=0)
    current_time: Optional[float] = None
    playing: Optional[bool] = None


class PreviewResponse(BaseModel):
    time: float
    svg: str
    state: Dict[str, Dict[str, Any]]


class PropertyCatalogResponse(BaseModel):
    defaults: Dict[str, Any]
    properties: List[Dict[str, Any]]


LayerResponse.model_rebuild()
