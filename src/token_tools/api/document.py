"""
Document module.

This module provides the :py:class:`Document` snapshot, an immutable record of
the layer stack plus the frame configuration, and the :py:class:`LayerStore`,
the single owner that mutates documents by publishing new snapshots.

Example usage::

    from token_tools.api.document import LayerStore

    store = LayerStore()
    logo = store.new_image_layer("logo.png")
    title = store.new_text_layer("HELLO", is_circular_text=True)
    store.update_layer(logo.id, adjustments={"brightness": 120})
    store.reorder(title.id, "down")
    store.update_frame(border_width=30, rim_design={"enabled": True})

    snapshot = store.snapshot  # hand this to the compositor
"""

import json
import logging
import os
from enum import Enum
from typing import Any, Callable, Iterator, Optional, Union

import attrs
from attrs import define, field
from attrs.converters import to_bool
from PIL import Image

from token_tools.api import pil_io
from token_tools.api.layers import (
    ImageLayer,
    Layer,
    ShapeLayer,
    TextLayer,
    layer_from_dict,
)
from token_tools.constants import (
    DEFAULT_CANVAS_SIZE,
    CanvasShape,
    Direction,
    ExportFormat,
    RimPattern,
    ShadowType,
)
from token_tools.validators import clamp_, range_

logger = logging.getLogger(__name__)


@define(frozen=True, kw_only=True)
class RimShadow:
    """Shadow cast by the rim, either outside the coin or inside the rim."""

    enabled: bool = field(default=False, converter=to_bool)
    type: ShadowType = field(default=ShadowType.OUTER, converter=ShadowType)
    blur: float = field(default=10.0, converter=clamp_(0.0, 100.0))
    color: str = field(default="#00000080")
    offset_x: float = field(default=0.0, converter=float)
    offset_y: float = field(default=4.0, converter=float)


def _to_density(value: Any) -> int:
    return int(round(clamp_(1, 360)(value)))


@define(frozen=True, kw_only=True)
class RimDesign:
    """Repeating pattern decoration placed around the rim."""

    enabled: bool = field(default=False, converter=to_bool)
    pattern: RimPattern = field(default=RimPattern.STRIPES, converter=RimPattern)
    density: int = field(default=20, converter=_to_density)
    size: float = field(default=8.0, converter=clamp_(1.0, 200.0))
    color: str = field(default="#ffffff")


def _to_record(kls: type) -> Callable[[Any], Any]:
    def converter(value: Any) -> Any:
        if value is None:
            return kls()
        if isinstance(value, dict):
            return kls(**value)
        return value

    return converter


def _to_layers(value: Any) -> tuple:
    return tuple(
        layer_from_dict(item) if isinstance(item, dict) else item
        for item in (value or ())
    )


@define(frozen=True, kw_only=True)
class Document:
    """
    Immutable document snapshot.

    .. py:attribute:: layers

        Layers in insertion order. Use :py:meth:`ordered_layers` for paint
        order.

    .. py:attribute:: background_color

        Interior color, or ``"transparent"``.
    """

    canvas_size: int = field(
        default=DEFAULT_CANVAS_SIZE, converter=int, validator=range_(1, 8192)
    )
    canvas_shape: CanvasShape = field(default=CanvasShape.CIRCLE, converter=CanvasShape)
    background_color: str = field(default="#ffffff")
    border_width: float = field(default=20.0, converter=clamp_(0.0, 4096.0))
    border_color: str = field(default="#ffd700")
    rim_shadow: RimShadow = field(factory=RimShadow, converter=_to_record(RimShadow))
    rim_design: RimDesign = field(factory=RimDesign, converter=_to_record(RimDesign))
    layers: tuple = field(factory=tuple, converter=_to_layers)

    @property
    def is_circle(self) -> bool:
        return self.canvas_shape == CanvasShape.CIRCLE

    @property
    def inner_radius(self) -> float:
        """Radius of the interior disc inside the rim."""
        return max(0.0, self.canvas_size / 2.0 - self.border_width)

    def ordered_layers(self) -> list:
        """Layers sorted ascending by ``z_index``; ties keep insertion order."""
        return sorted(self.layers, key=lambda layer: layer.z_index)

    def get(self, layer_id: str) -> Layer:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        raise KeyError(layer_id)

    def __contains__(self, layer_id: object) -> bool:
        return any(layer.id == layer_id for layer in self.layers)

    def __len__(self) -> int:
        return len(self.layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.ordered_layers())

    def to_dict(self) -> dict:
        data = attrs.asdict(
            self,
            filter=lambda attribute, value: attribute.name != "layers",
            value_serializer=_serialize,
        )
        data["layers"] = [layer.to_dict() for layer in self.layers]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        return cls(**data)

    def save(self, fp: Union[str, os.PathLike, Any]) -> None:
        """Write the document as JSON to a path or a text file object."""
        if isinstance(fp, (str, os.PathLike)):
            with open(fp, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
        else:
            json.dump(self.to_dict(), fp, indent=2)

    @classmethod
    def load(cls, fp: Union[str, os.PathLike, Any]) -> "Document":
        """Read a document from a JSON path or text file object."""
        if isinstance(fp, (str, os.PathLike)):
            with open(fp, "r", encoding="utf-8") as f:
                return cls.from_dict(json.load(f))
        return cls.from_dict(json.load(fp))


def _serialize(instance: Any, attribute: Any, value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class LayerStore(object):
    """
    Owner of the document model.

    Every mutation replaces the current :py:class:`Document` with a new
    snapshot and notifies subscribers. Snapshots already handed out are never
    modified.
    """

    def __init__(self, document: Optional[Document] = None):
        self._document = document if document is not None else Document()
        self._subscribers: list[Callable[[Document], Any]] = []

    @property
    def snapshot(self) -> Document:
        return self._document

    def subscribe(self, callback: Callable[[Document], Any]) -> Callable[[], None]:
        """Register a callback for new snapshots. Returns an unsubscriber."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, document: Document) -> Document:
        self._document = document
        for callback in list(self._subscribers):
            callback(document)
        return document

    def next_z_index(self) -> int:
        if not self._document.layers:
            return 0
        return max(layer.z_index for layer in self._document.layers) + 1

    def add_layer(self, layer: Layer) -> Layer:
        if layer.id in self._document:
            raise ValueError("Duplicate layer id: %s" % layer.id)
        if any(x.z_index == layer.z_index for x in self._document.layers):
            z_index = self.next_z_index()
            logger.debug(
                "z_index %d is taken, using %d for %s" % (layer.z_index, z_index, layer.id)
            )
            layer = attrs.evolve(layer, z_index=z_index)
        logger.debug("Add %r" % layer)
        self._publish(
            attrs.evolve(self._document, layers=self._document.layers + (layer,))
        )
        return layer

    def update_layer(self, layer_id: str, **patch: Any) -> Layer:
        """
        Apply a property patch to a layer.

        ``adjustments`` may be given as a partial dict, which is merged into
        the current adjustments.

        A ``z_index`` already used by another layer is rejected; use
        :py:meth:`reorder` to swap positions.
        """
        if "id" in patch:
            raise ValueError("Layer id cannot be changed")
        layer = self._document.get(layer_id)
        if "z_index" in patch and any(
            x.id != layer_id and x.z_index == int(patch["z_index"])
            for x in self._document.layers
        ):
            raise ValueError("z_index %s is taken" % patch["z_index"])
        adjustments = patch.get("adjustments")
        if isinstance(adjustments, dict) and hasattr(layer, "adjustments"):
            patch["adjustments"] = attrs.evolve(layer.adjustments, **adjustments)
        new_layer = attrs.evolve(layer, **patch)
        self._replace(new_layer)
        return new_layer

    def remove_layer(self, layer_id: str) -> None:
        layer = self._document.get(layer_id)
        logger.debug("Remove %r" % layer)
        self._publish(
            attrs.evolve(
                self._document,
                layers=tuple(x for x in self._document.layers if x.id != layer_id),
            )
        )

    def reorder(self, layer_id: str, direction: Union[str, Direction]) -> Document:
        """
        Swap the ``z_index`` of the layer with its neighbor in paint order.

        Moving the topmost layer up or the bottommost layer down is a no-op.
        """
        direction = Direction(direction)
        ordered = self._document.ordered_layers()
        index = next(
            (i for i, layer in enumerate(ordered) if layer.id == layer_id), None
        )
        if index is None:
            raise KeyError(layer_id)
        neighbor_index = index + 1 if direction == Direction.UP else index - 1
        if neighbor_index < 0 or neighbor_index >= len(ordered):
            logger.debug("Cannot move %s %s" % (layer_id, direction.value))
            return self._document

        target, neighbor = ordered[index], ordered[neighbor_index]
        swapped = {
            target.id: attrs.evolve(target, z_index=neighbor.z_index),
            neighbor.id: attrs.evolve(neighbor, z_index=target.z_index),
        }
        return self._publish(
            attrs.evolve(
                self._document,
                layers=tuple(swapped.get(x.id, x) for x in self._document.layers),
            )
        )

    def update_frame(self, **patch: Any) -> Document:
        """Patch frame settings; ``rim_shadow`` and ``rim_design`` may be partial dicts."""
        if "layers" in patch:
            raise ValueError("Use the layer operations to change layers")
        for key in ("rim_shadow", "rim_design"):
            if isinstance(patch.get(key), dict):
                patch[key] = attrs.evolve(getattr(self._document, key), **patch[key])
        return self._publish(attrs.evolve(self._document, **patch))

    def new_image_layer(
        self,
        source: Union[str, bytes, Image.Image],
        crop: bool = False,
        **kwargs: Any,
    ) -> ImageLayer:
        """
        Add an image layer inset 50px from the canvas edges.

        A PIL image is stored as PNG bytes, center-cropped to a square first
        when ``crop`` is set.
        """
        if isinstance(source, Image.Image):
            if crop:
                source = pil_io.crop_square(source)
            source = pil_io.encode(source, ExportFormat.PNG, max_bytes=None)
        elif crop:
            raise ValueError("Only PIL images can be cropped")
        size = self._document.canvas_size
        kwargs.setdefault("x", 50)
        kwargs.setdefault("y", 50)
        kwargs.setdefault("width", size - 100)
        kwargs.setdefault("height", size - 100)
        kwargs.setdefault("z_index", self.next_z_index())
        layer = self.add_layer(ImageLayer(source=source, **kwargs))
        assert isinstance(layer, ImageLayer)
        return layer

    def new_text_layer(self, content: str, **kwargs: Any) -> TextLayer:
        """Add a text layer centered on the canvas."""
        if not content.strip():
            raise ValueError("Text layer needs some text")
        size = self._document.canvas_size
        font_size = float(kwargs.get("font_size", 24.0))
        kwargs.setdefault("x", size / 2.0 - 50)
        kwargs.setdefault("y", size / 2.0)
        kwargs.setdefault("width", 100)
        kwargs.setdefault("height", font_size + 10)
        kwargs.setdefault("z_index", self.next_z_index())
        layer = self.add_layer(TextLayer(content=content, **kwargs))
        assert isinstance(layer, TextLayer)
        return layer

    def new_shape_layer(self, shape: str, **kwargs: Any) -> ShapeLayer:
        """Add a shape layer centered on the canvas."""
        size = self._document.canvas_size
        kwargs.setdefault("x", size / 4.0)
        kwargs.setdefault("y", size / 4.0)
        kwargs.setdefault("width", size / 2.0)
        kwargs.setdefault("height", size / 2.0)
        kwargs.setdefault("z_index", self.next_z_index())
        layer = self.add_layer(ShapeLayer(shape=shape, **kwargs))
        assert isinstance(layer, ShapeLayer)
        return layer

    def _replace(self, layer: Layer) -> None:
        self._publish(
            attrs.evolve(
                self._document,
                layers=tuple(
                    layer if x.id == layer.id else x for x in self._document.layers
                ),
            )
        )
