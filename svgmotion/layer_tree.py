"""Pure operations over an immutable, versioned layer tree.

Every operation takes a `LayerTree` and returns the next one. A tree that a
reader captured before an edit is never modified, so a preview and an export
can work from the same snapshot without coordination. Operations addressed to
unknown ids return the input tree unchanged.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from svgmotion.errors import NotFoundError, ValidationError
from svgmotion.ids import IdSource, default_id_source
from svgmotion.models import Keyframe, Layer, LayerKind
from svgmotion.timeline import Timeline

logger = logging.getLogger(__name__)

# Fields callers may merge through `update`; ids and derived flags are not among them.
UPDATABLE_FIELDS = {"name", "properties", "keyframes", "children", "path_data"}


@dataclass(frozen=True)
class LayerTree:
    layers: Tuple[Layer, ...] = ()
    version: int = 0
    selected_id: Optional[str] = None
    highlighted_id: Optional[str] = None

    def __iter__(self) -> Iterator[Layer]:
        return iter_layers(self.layers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "selected_id": self.selected_id,
            "highlighted_id": self.highlighted_id,
            "layers": [layer.to_dict() for layer in self.layers],
        }


def iter_layers(layers: Iterable[Layer]) -> Iterator[Layer]:
    """Depth-first walk; a group is yielded before its children."""
    for layer in layers:
        yield layer
        if layer.children:
            yield from iter_layers(layer.children)


def find_layer(tree: LayerTree, layer_id: str) -> Optional[Layer]:
    for layer in iter_layers(tree.layers):
        if layer.id == layer_id:
            return layer
    return None


def get_layer(tree: LayerTree, layer_id: str) -> Layer:
    layer = find_layer(tree, layer_id)
    if layer is None:
        raise NotFoundError(f"layer '{layer_id}' not found")
    return layer


def leaf_ids(tree: LayerTree) -> List[str]:
    return [layer.id for layer in iter_layers(tree.layers) if not layer.is_group]


def _check_tree(layers: Sequence[Layer]) -> None:
    counts = Counter(layer.id for layer in iter_layers(layers))
    duplicates = sorted(layer_id for layer_id, n in counts.items() if n > 1)
    if duplicates:
        raise ValidationError(f"Duplicate layer ids in tree: {duplicates}")
    for layer in iter_layers(layers):
        if layer.children and not layer.is_group:
            raise ValidationError(f"Layer '{layer.id}' is not a group and cannot have children")


def _sorted_keyframes(keyframes: Iterable[Keyframe]) -> Tuple[Keyframe, ...]:
    # sorted() is stable: keyframes sharing a time keep insertion order.
    return tuple(sorted(keyframes, key=lambda kf: kf.time))


def _with_flags(layers: Tuple[Layer, ...], selected_id: Optional[str], highlighted_id: Optional[str]) -> Tuple[Layer, ...]:
    out = []
    for layer in layers:
        children = _with_flags(layer.children, selected_id, highlighted_id) if layer.children else layer.children
        is_selected = layer.id == selected_id
        is_highlighted = layer.id == highlighted_id
        if (
            children is not layer.children
            or layer.is_selected != is_selected
            or layer.is_highlighted != is_highlighted
        ):
            layer = replace(layer, children=children, is_selected=is_selected, is_highlighted=is_highlighted)
        out.append(layer)
    return tuple(out)


def _commit(tree: LayerTree, layers: Tuple[Layer, ...], **changes: Any) -> LayerTree:
    """Build the next tree version, recomputing the derived flags."""
    selected_id = changes.pop("selected_id", tree.selected_id)
    highlighted_id = changes.pop("highlighted_id", tree.highlighted_id)
    ids = {layer.id for layer in iter_layers(layers)}
    if selected_id not in ids:
        selected_id = None
    if highlighted_id not in ids:
        highlighted_id = None
    return replace(
        tree,
        layers=_with_flags(layers, selected_id, highlighted_id),
        version=tree.version + 1,
        selected_id=selected_id,
        highlighted_id=highlighted_id,
        **changes,
    )


def _map_layer(
    layers: Tuple[Layer, ...], layer_id: str, fn: Callable[[Layer], Layer]
) -> Tuple[Tuple[Layer, ...], bool]:
    """Replace the layer with `layer_id` at any depth by `fn(layer)`."""
    out = []
    found = False
    for layer in layers:
        if not found and layer.id == layer_id:
            layer = fn(layer)
            found = True
        elif not found and layer.children:
            children, found = _map_layer(layer.children, layer_id, fn)
            if found:
                layer = replace(layer, children=children)
        out.append(layer)
    return tuple(out), found


def from_layers(layers: Iterable[Layer]) -> LayerTree:
    """Start a tree from extracted layers."""
    layers = tuple(layers)
    _check_tree(layers)
    return LayerTree(layers=_with_flags(layers, None, None))


def update(tree: LayerTree, layer_id: str, **fields: Any) -> LayerTree:
    """Merge `fields` into the matching layer."""
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update layer fields: {sorted(unknown)}")

    def apply(layer: Layer) -> Layer:
        changes = dict(fields)
        if "properties" in changes:
            changes["properties"] = dict(changes["properties"] or {})
        if "keyframes" in changes:
            changes["keyframes"] = _sorted_keyframes(changes["keyframes"] or ())
        if "children" in changes:
            if not layer.is_group and changes["children"]:
                raise ValidationError(f"Layer '{layer.id}' is not a group and cannot have children")
            changes["children"] = tuple(changes["children"] or ())
        return replace(layer, **changes)

    layers, found = _map_layer(tree.layers, layer_id, apply)
    if not found:
        logger.debug("update: layer %s not found", layer_id)
        return tree
    if "children" in fields:
        _check_tree(layers)
    return _commit(tree, layers)


def rename(tree: LayerTree, layer_id: str, new_name: str) -> LayerTree:
    return update(tree, layer_id, name=new_name)


def set_property(tree: LayerTree, layer_id: str, key: str, value: Any) -> LayerTree:
    """Merge one property into the layer's base snapshot."""
    layer = find_layer(tree, layer_id)
    if layer is None:
        logger.debug("set_property: layer %s not found", layer_id)
        return tree
    return update(tree, layer_id, properties={**layer.properties, key: value})


def add_keyframe(
    tree: LayerTree,
    layer_id: str,
    time: float,
    properties: Mapping[str, Any],
    id_source: Optional[IdSource] = None,
    keyframe_id: Optional[str] = None,
) -> LayerTree:
    """Append a keyframe and keep the layer's keyframes sorted by time."""
    if isinstance(time, bool) or not isinstance(time, (int, float)):
        raise ValidationError(f"Keyframe time must be a number, got {time!r}")
    if time < 0:
        raise ValidationError(f"Keyframe time must be non-negative, got {time}")

    layer = find_layer(tree, layer_id)
    if layer is None:
        logger.debug("add_keyframe: layer %s not found", layer_id)
        return tree
    if keyframe_id is not None and any(kf.id == keyframe_id for kf in layer.keyframes):
        raise ValidationError(f"Keyframe id '{keyframe_id}' already exists on layer '{layer_id}'")

    keyframe = Keyframe(
        id=keyframe_id or (id_source or default_id_source).new_id("kf"),
        time=time,
        properties=dict(properties),
    )
    return update(tree, layer_id, keyframes=layer.keyframes + (keyframe,))


def capture_keyframe(
    tree: LayerTree, layer_id: str, timeline: Timeline, id_source: Optional[IdSource] = None
) -> LayerTree:
    """Record the layer's current base properties at the playhead."""
    layer = find_layer(tree, layer_id)
    if layer is None:
        logger.debug("capture_keyframe: layer %s not found", layer_id)
        return tree
    return add_keyframe(tree, layer_id, timeline.current_time, layer.properties, id_source=id_source)


def remove_keyframe(tree: LayerTree, layer_id: str, keyframe_id: str) -> LayerTree:
    layer = find_layer(tree, layer_id)
    if layer is None or not any(kf.id == keyframe_id for kf in layer.keyframes):
        logger.debug("remove_keyframe: %s/%s not found", layer_id, keyframe_id)
        return tree
    return update(tree, layer_id, keyframes=[kf for kf in layer.keyframes if kf.id != keyframe_id])


def group(
    tree: LayerTree,
    layer_ids: Sequence[str],
    group_name: str,
    id_source: Optional[IdSource] = None,
) -> LayerTree:
    """Wrap top-level layers into a new group appended at the top level.

    The new group is the last entry of the returned tree's `layers`.
    """
    wanted = list(dict.fromkeys(layer_ids))
    if len(wanted) < 2:
        raise ValidationError("At least two layers are required to create a group")

    top_level = {layer.id for layer in tree.layers}
    skipped = [layer_id for layer_id in wanted if layer_id not in top_level]
    if skipped:
        logger.info("group: ignoring ids that are not top-level layers: %s", skipped)
    if len(wanted) - len(skipped) < 2:
        raise ValidationError("At least two top-level layers are required to create a group")

    members = tuple(layer for layer in tree.layers if layer.id in wanted)
    remaining = tuple(layer for layer in tree.layers if layer.id not in wanted)
    new_group = Layer(
        id=(id_source or default_id_source).new_id("group"),
        name=group_name,
        kind=LayerKind.GROUP,
        children=members,
    )
    logger.debug("group: %s wraps %s", new_group.id, [m.id for m in members])
    return _commit(tree, remaining + (new_group,))


def _splice_group(layers: Tuple[Layer, ...], group_id: str) -> Tuple[Tuple[Layer, ...], bool]:
    out: List[Layer] = []
    found = False
    for layer in layers:
        if not found and layer.id == group_id:
            found = True
            if layer.is_group:
                out.extend(layer.children)
                continue
            # Not a group: leave the tree as it is.
            return layers, False
        if not found and layer.children:
            children, found = _splice_group(layer.children, group_id)
            if found:
                layer = replace(layer, children=children)
        out.append(layer)
    return tuple(out), found


def ungroup(tree: LayerTree, group_id: str) -> LayerTree:
    """Replace a group with its children, in the group's position."""
    layers, found = _splice_group(tree.layers, group_id)
    if not found:
        logger.debug("ungroup: %s is not a group in this tree", group_id)
        return tree
    return _commit(tree, layers)


def select(tree: LayerTree, layer_id: Optional[str]) -> LayerTree:
    """Make `layer_id` the only selected layer; None clears the selection."""
    if layer_id is not None and find_layer(tree, layer_id) is None:
        logger.debug("select: layer %s not found", layer_id)
        return tree
    return _commit(tree, tree.layers, selected_id=layer_id)


def highlight(tree: LayerTree, layer_id: Optional[str]) -> LayerTree:
    """Make `layer_id` the only highlighted layer; None clears the highlight."""
    if layer_id is not None and find_layer(tree, layer_id) is None:
        logger.debug("highlight: layer %s not found", layer_id)
        return tree
    return _commit(tree, tree.layers, highlighted_id=layer_id)
