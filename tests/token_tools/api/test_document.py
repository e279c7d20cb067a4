import io
import logging

import pytest

from token_tools.api import pil_io
from token_tools.api.document import Document, LayerStore, RimDesign, RimShadow
from token_tools.api.layers import ImageLayer, ShapeLayer, TextLayer
from token_tools.composite import composite_pil
from token_tools.constants import CanvasShape, RimPattern, ShadowType

from ..utils import solid_image

logger = logging.getLogger(__name__)


@pytest.fixture
def store():
    store = LayerStore()
    store.new_image_layer("logo.png")
    store.new_text_layer("HELLO")
    store.new_shape_layer("star")
    return store


def _order(store):
    return [layer.id for layer in store.snapshot.ordered_layers()]


def test_document_defaults():
    document = Document()
    assert document.canvas_size == 500
    assert document.canvas_shape == CanvasShape.CIRCLE
    assert document.is_circle
    assert document.inner_radius == 230.0
    assert document.rim_shadow == RimShadow()
    assert document.rim_design == RimDesign()
    assert len(document) == 0


def test_document_canvas_size_range():
    with pytest.raises(ValueError):
        Document(canvas_size=0)


def test_rim_design_density():
    assert RimDesign(density=0).density == 1
    assert RimDesign(density=20.4).density == 20
    assert RimDesign(pattern="dots").pattern == RimPattern.DOTS


def test_new_layers(store):
    document = store.snapshot
    assert len(document) == 3
    kinds = [type(layer) for layer in document.ordered_layers()]
    assert kinds == [ImageLayer, TextLayer, ShapeLayer]
    assert [layer.z_index for layer in document.ordered_layers()] == [0, 1, 2]
    image = document.ordered_layers()[0]
    assert image.bbox == (50.0, 50.0, 450.0, 450.0)


def test_next_z_index(store):
    assert store.next_z_index() == 3
    assert LayerStore().next_z_index() == 0


def test_add_layer_duplicate_id(store):
    layer = store.snapshot.ordered_layers()[0]
    with pytest.raises(ValueError):
        store.add_layer(layer)


def test_add_layer_z_collision(store):
    layer = store.add_layer(ImageLayer(source="other.png", z_index=1))
    assert layer.z_index == 3
    z_indices = [x.z_index for x in store.snapshot.layers]
    assert len(set(z_indices)) == len(z_indices)


def test_new_text_layer_empty():
    with pytest.raises(ValueError):
        LayerStore().new_text_layer("   ")


def test_update_layer_merges_adjustments(store):
    layer = store.snapshot.ordered_layers()[0]
    store.update_layer(layer.id, adjustments={"brightness": 150})
    store.update_layer(layer.id, adjustments={"sepia": 20}, x=12)
    updated = store.snapshot.get(layer.id)
    assert updated.adjustments.brightness == 150.0
    assert updated.adjustments.sepia == 20.0
    assert updated.x == 12.0


def test_update_layer_id(store):
    layer = store.snapshot.ordered_layers()[0]
    with pytest.raises(ValueError):
        store.update_layer(layer.id, id="other")


def test_update_layer_z_collision(store):
    bottom, middle, _ = store.snapshot.ordered_layers()
    with pytest.raises(ValueError):
        store.update_layer(middle.id, z_index=bottom.z_index)
    store.update_layer(middle.id, z_index=10)
    store.update_layer(middle.id, z_index=10)
    z_indices = [x.z_index for x in store.snapshot.layers]
    assert len(set(z_indices)) == len(z_indices)
    store.reorder(bottom.id, "up")
    assert _order(store)[1] == bottom.id


@pytest.mark.parametrize("crop, expected", [(False, (40, 20)), (True, (20, 20))])
def test_new_image_layer_from_image(crop, expected):
    store = LayerStore(Document(canvas_size=64, canvas_shape="square"))
    image = solid_image((40, 20), (0, 0, 255, 255))
    layer = store.new_image_layer(image, crop=crop, x=0, y=0, width=64, height=64)
    assert isinstance(layer.source, bytes)
    assert pil_io.decode(layer.source).size == expected
    composited = composite_pil(store.snapshot)
    assert composited.getpixel((32, 32)) == (0, 0, 255, 255)


def test_new_image_layer_crop_needs_image(store):
    with pytest.raises(ValueError):
        store.new_image_layer("logo.png", crop=True)


def test_update_layer_unknown(store):
    with pytest.raises(KeyError):
        store.update_layer("missing", x=1)


def test_snapshots_are_immutable(store):
    before = store.snapshot
    layer = before.ordered_layers()[1]
    store.update_layer(layer.id, content="WORLD")
    assert before.get(layer.id).content == "HELLO"
    assert store.snapshot.get(layer.id).content == "WORLD"
    assert store.snapshot is not before


def test_remove_layer(store):
    layer = store.snapshot.ordered_layers()[1]
    store.remove_layer(layer.id)
    assert layer.id not in store.snapshot
    assert len(store.snapshot) == 2


@pytest.mark.parametrize("index", [0, 1])
def test_reorder_up_down_restores(store, index):
    before = _order(store)
    layer_id = before[index]
    store.reorder(layer_id, "up")
    assert _order(store) != before
    store.reorder(layer_id, "down")
    assert _order(store) == before


def test_reorder_swaps_z_index(store):
    bottom, middle, _ = store.snapshot.ordered_layers()
    store.reorder(bottom.id, "up")
    assert store.snapshot.get(bottom.id).z_index == middle.z_index
    assert store.snapshot.get(middle.id).z_index == bottom.z_index


@pytest.mark.parametrize("index, direction", [(-1, "up"), (0, "down")])
def test_reorder_at_the_ends(store, index, direction):
    before = store.snapshot
    layer_id = _order(store)[index]
    assert store.reorder(layer_id, direction) is before


def test_reorder_errors(store):
    with pytest.raises(KeyError):
        store.reorder("missing", "up")
    with pytest.raises(ValueError):
        store.reorder(_order(store)[0], "sideways")


def test_ordered_layers_ties_keep_insertion_order():
    first = ImageLayer(source="a.png", z_index=5)
    second = ImageLayer(source="b.png", z_index=5)
    document = Document(layers=[first, second])
    assert [x.id for x in document.ordered_layers()] == [first.id, second.id]


def test_update_frame(store):
    store.update_frame(
        border_width=30,
        rim_shadow={"enabled": True, "type": "inner"},
        rim_design={"density": 12},
    )
    document = store.snapshot
    assert document.border_width == 30.0
    assert document.rim_shadow.enabled
    assert document.rim_shadow.type == ShadowType.INNER
    assert document.rim_shadow.blur == 10.0
    assert document.rim_design.density == 12
    assert document.rim_design.pattern == RimPattern.STRIPES


def test_update_frame_layers(store):
    with pytest.raises(ValueError):
        store.update_frame(layers=())


def test_subscribe(store):
    received = []
    unsubscribe = store.subscribe(received.append)
    store.update_frame(background_color="#000000")
    assert received == [store.snapshot]
    unsubscribe()
    store.update_frame(background_color="#ffffff")
    assert len(received) == 1


def test_document_json(store, tmp_path):
    store.update_layer(store.snapshot.ordered_layers()[0].id, adjustments={"hue": 90})
    path = tmp_path / "token.json"
    store.snapshot.save(str(path))
    assert Document.load(str(path)) == store.snapshot


def test_document_json_file_object(store):
    with io.StringIO() as f:
        store.snapshot.save(f)
        f.seek(0)
        assert Document.load(f) == store.snapshot
