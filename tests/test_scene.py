from types import SimpleNamespace

import pytest

from gengine.components import Children, Lifetime, Parent, ScheduledDeletion, Tag
from gengine.scene import Entity, Scene


@pytest.fixture
def scene():
    return Scene("test", engine="engine")


def test_scene_properties(scene):
    assert scene.name == "test"
    assert scene.engine == "engine"
    assert len(scene) == 0


def test_create_entity_default_tag(scene):
    entity = scene.create_entity()
    assert entity.get_component(Tag).tag == "Entity"
    assert entity in scene


def test_create_entity_named(scene):
    entity = scene.create_entity("player")
    assert entity.get_component(Tag).tag == "player"


def test_get_entity_first_match(scene):
    first = scene.create_entity("box")
    scene.create_entity("box")
    assert scene.get_entity("box") == first


def test_get_entity_missing_is_null(scene):
    scene.create_entity("a")
    assert not scene.get_entity("zzz")
    assert not Entity()


def test_add_component_twice_raises(scene):
    entity = scene.create_entity()
    entity.add_component(Lifetime(1.0, True))
    with pytest.raises(ValueError):
        entity.add_component(Lifetime())


def test_get_missing_component(scene):
    entity = scene.create_entity()
    with pytest.raises(KeyError):
        entity.get_component(Lifetime)
    assert entity.try_get_component(Lifetime) is None
    assert entity.has_component(Lifetime) is False


def test_get_or_add_returns_same_instance(scene):
    entity = scene.create_entity()
    first = entity.get_or_add_component(Lifetime)
    assert entity.get_or_add_component(Lifetime) is first


def test_remove_component(scene):
    entity = scene.create_entity()
    entity.add_component(Lifetime())
    entity.remove_component(Lifetime)
    assert not entity.has_component(Lifetime)
    with pytest.raises(KeyError):
        entity.remove_component(Lifetime)


def test_null_entity_component_access_raises():
    with pytest.raises(ValueError):
        Entity().has_component(Tag)


def test_view_filters_components(scene):
    a = scene.create_entity("a")
    b = scene.create_entity("b")
    a.add_component(Lifetime())
    assert scene.view(Lifetime) == [a]
    assert scene.view(Tag) == [a, b]


def test_set_parent_links(scene):
    parent = scene.create_entity("p")
    child = scene.create_entity("c")
    child.set_parent(parent)
    assert child.get_component(Parent).entity == parent
    assert parent.get_component(Children).children == (child,)
    assert parent.hierarchy_height() == 1
    assert child.hierarchy_height() == 0


def test_heights_propagate(scene):
    grand = scene.create_entity("g")
    parent = scene.create_entity("p")
    child = scene.create_entity("c")
    parent.set_parent(grand)
    child.set_parent(parent)
    assert grand.hierarchy_height() == 2
    assert parent.hierarchy_height() == 1


def test_reparent_removes_from_old_parent(scene):
    old = scene.create_entity("old")
    new = scene.create_entity("new")
    child = scene.create_entity("c")
    child.set_parent(old)
    child.set_parent(new)
    assert not old.has_component(Children)
    assert child.get_component(Parent).entity == new
    assert len(new.get_component(Children)) == 1


def test_add_child(scene):
    parent = scene.create_entity()
    child = scene.create_entity()
    parent.add_child(child)
    assert child.get_component(Parent).entity == parent
    with pytest.raises(ValueError):
        parent.add_child(parent)


def test_self_parent_raises(scene):
    entity = scene.create_entity()
    with pytest.raises(ValueError):
        entity.set_parent(entity)


def test_cycle_raises(scene):
    a = scene.create_entity()
    b = scene.create_entity()
    b.set_parent(a)
    with pytest.raises(ValueError):
        a.set_parent(b)
    assert not a.has_component(Parent)


def test_destroy_schedules_and_detaches(scene):
    parent = scene.create_entity()
    child = scene.create_entity()
    child.set_parent(parent)
    child.destroy()
    assert child.has_component(ScheduledDeletion)
    assert len(parent.get_component(Children)) == 0


def test_destroy_null_entity_raises():
    with pytest.raises(ValueError):
        Entity().destroy()


def test_scene_destroy_fires_callbacks(scene):
    seen = []
    scene.on_destroy(Lifetime, lambda s, e: seen.append((s, e, e.get_component(Lifetime))))
    entity = scene.create_entity()
    lifetime = entity.add_component(Lifetime())
    scene.destroy(entity)
    assert seen == [(scene, entity, lifetime)]
    assert entity not in scene
    with pytest.raises(KeyError):
        scene.destroy(entity)


def test_remove_component_fires_callback(scene):
    seen = []
    scene.on_destroy(Lifetime, lambda s, e: seen.append(e))
    entity = scene.create_entity()
    entity.add_component(Lifetime())
    entity.remove_component(Lifetime)
    assert seen == [entity]


def test_render_views_register_and_get(scene):
    view = SimpleNamespace(camera=object())
    scene.register_render_view("shadow", view)
    assert scene.get_render_view("shadow") is view
    assert scene.render_views_with_names() == [("shadow", view)]
    with pytest.raises(ValueError):
        scene.register_render_view("shadow", view)


def test_render_view_requires_camera(scene):
    with pytest.raises(ValueError):
        scene.register_render_view("x", SimpleNamespace(camera=None))


def test_unregister_render_view(scene):
    scene.register_render_view("x", SimpleNamespace(camera=1))
    scene.unregister_render_view("x")
    with pytest.raises(KeyError):
        scene.get_render_view("x")
    with pytest.raises(KeyError):
        scene.unregister_render_view("x")


def test_render_views_main_last(scene):
    a = SimpleNamespace(camera=1)
    main = SimpleNamespace(camera=2)
    b = SimpleNamespace(camera=3)
    scene.register_render_view("a", a)
    scene.register_render_view("main", main)
    scene.register_render_view("b", b)
    views = scene.render_views()
    assert views[-1] is main
    assert views == [b, a, main]