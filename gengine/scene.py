"""Scenes hold entities and their components; entities form a parent/child hierarchy."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .components import Children, Parent, ScheduledDeletion, Tag

DestroyCallback = Callable[["Scene", "Entity"], None]


class Scene:
    """A named collection of entities, their components and render views."""

    def __init__(self, name: str, engine: Any = None) -> None:
        self._name = name
        self._engine = engine
        self._entities: Dict[int, Dict[type, Any]] = {}
        self._next_handle = 0
        self._destroy_listeners: Dict[type, List[DestroyCallback]] = {}
        self._render_views: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def engine(self) -> Any:
        """The engine that owns this scene (not owned by the scene)."""
        return self._engine

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, item: Union["Entity", int]) -> bool:
        if isinstance(item, Entity):
            return item.scene is self and item.handle in self._entities
        return item in self._entities

    def _components(self, handle: int) -> Dict[type, Any]:
        try:
            return self._entities[handle]
        except KeyError:
            raise KeyError(f"entity {handle} does not exist") from None

    def create_entity(self, name: str = "") -> "Entity":
        """Create an entity tagged with ``name``, or "Entity" when empty."""
        handle = self._next_handle
        self._next_handle += 1
        self._entities[handle] = {}
        entity = Entity(handle, self)
        entity.add_component(Tag(name if name else "Entity"))
        return entity

    def get_entity(self, name: str) -> "Entity":
        """The first entity whose tag is ``name``, or a null entity."""
        for handle, components in list(self._entities.items()):
            tag = components.get(Tag)
            if tag is not None and tag.tag == name:
                return Entity(handle, self)
        return Entity()

    def view(self, *component_types: type) -> List["Entity"]:
        """Entities that have every one of ``component_types``, oldest first."""
        return [
            Entity(handle, self)
            for handle, components in list(self._entities.items())
            if all(t in components for t in component_types)
        ]

    def on_destroy(self, component_type: type, callback: DestroyCallback) -> None:
        """Call ``callback(scene, entity)`` before a component of this type is removed."""
        self._destroy_listeners.setdefault(component_type, []).append(callback)

    def _remove(self, handle: int, component_type: type) -> None:
        components = self._components(handle)
        if component_type not in components:
            raise KeyError(f"entity missing component {component_type.__name__}")
        for callback in list(self._destroy_listeners.get(component_type, ())):
            callback(self, Entity(handle, self))
        components.pop(component_type, None)

    def destroy(self, handle: Union["Entity", int]) -> None:
        """Remove an entity and all its components at once."""
        key = handle.handle if isinstance(handle, Entity) else handle
        components = self._components(key)
        for component_type in list(components):
            if component_type in components:
                self._remove(key, component_type)
        del self._entities[key]

    def register_render_view(self, view_name: str, view: Any) -> None:
        """Add a named render view; it must have a camera."""
        if view_name in self._render_views:
            raise ValueError(f"render view {view_name!r} already registered")
        if getattr(view, "camera", None) is None:
            raise ValueError("render view has no camera")
        self._render_views[view_name] = view

    def unregister_render_view(self, view_name: str) -> None:
        try:
            del self._render_views[view_name]
        except KeyError:
            raise KeyError(f"no render view named {view_name!r}") from None

    def get_render_view(self, view_name: str) -> Any:
        try:
            return self._render_views[view_name]
        except KeyError:
            raise KeyError(f"no render view named {view_name!r}") from None

    def render_views_with_names(self) -> List[Tuple[str, Any]]:
        return list(self._render_views.items())

    def render_views(self) -> List[Any]:
        """All render views in drawing order; the "main" view comes last."""
        views: List[Any] = []
        for name, view in self._render_views.items():
            if name == "main":
                views.insert(0, view)
            else:
                views.append(view)
        views.reverse()
        return views


class Entity:
    """A lightweight handle to an entity in a scene."""

    __slots__ = ("_handle", "_scene")

    def __init__(self, handle: Optional[int] = None, scene: Optional[Scene] = None) -> None:
        self._handle = handle
        self._scene = scene

    @property
    def handle(self) -> Optional[int]:
        return self._handle

    @property
    def scene(self) -> Optional[Scene]:
        return self._scene

    def __bool__(self) -> bool:
        return self._handle is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self._handle == other._handle and self._scene is other._scene

    def __hash__(self) -> int:
        return hash((self._handle, id(self._scene)))

    def __repr__(self) -> str:
        return f"Entity({self._handle!r})"

    def _store(self) -> Dict[type, Any]:
        if self._handle is None or self._scene is None:
            raise ValueError("invalid entity")
        return self._scene._components(self._handle)

    def add_component(self, component: Any) -> Any:
        """Attach ``component``; an entity holds one component of each type."""
        store = self._store()
        component_type = type(component)
        if component_type in store:
            raise ValueError(f"entity already has component {component_type.__name__}")
        store[component_type] = component
        return component

    def get_or_add_component(self, component_type: type) -> Any:
        store = self._store()
        if component_type not in store:
            store[component_type] = component_type()
        return store[component_type]

    def get_component(self, component_type: type) -> Any:
        try:
            return self._store()[component_type]
        except KeyError:
            raise KeyError(f"entity missing component {component_type.__name__}") from None

    def try_get_component(self, component_type: type) -> Any:
        return self._store().get(component_type)

    def has_component(self, component_type: type) -> bool:
        return component_type in self._store()

    def remove_component(self, component_type: type) -> None:
        self._store()
        self._scene._remove(self._handle, component_type)

    def destroy(self) -> None:
        """Detach from any parent and schedule deletion at the next update."""
        if not self:
            raise ValueError("cannot delete invalid entity")
        parent = self.try_get_component(Parent)
        if parent is not None:
            parent.entity.get_component(Children).remove_child(self)
        self.get_or_add_component(ScheduledDeletion)

    def set_parent(self, parent: "Entity") -> None:
        """Make ``parent`` the parent of this entity."""
        if parent == self:
            raise ValueError("an entity cannot be its own parent")
        ancestor = parent
        while ancestor.has_component(Parent):
            ancestor = ancestor.get_component(Parent).entity
            if ancestor == self:
                raise ValueError("parenting creates a cycle")

        if self.has_component(Parent):
            old_parent = self.get_component(Parent).entity
            old_children = old_parent.get_component(Children)
            old_children.remove_child(self)
            if len(old_children) == 0:
                old_parent.remove_component(Children)
            self.get_component(Parent).entity = parent
        else:
            self.add_component(Parent(parent))

        parent.get_or_add_component(Children).add_child(self)

        # raise the cached heights of every ancestor the new subtree makes taller
        current = parent
        height = self.hierarchy_height()
        while current.has_component(Children) and (
            current.get_component(Children).cached_height <= 1 + height
        ):
            height += 1
            current.get_component(Children).cached_height = height
            if current.has_component(Parent):
                current = current.get_component(Parent).entity
            else:
                break

    def add_child(self, child: "Entity") -> None:
        if child == self:
            raise ValueError("an entity cannot be its own child")
        child.set_parent(self)

    def hierarchy_height(self) -> int:
        """Height of the subtree below this entity; zero for a leaf."""
        children = self.try_get_component(Children)
        return children.cached_height if children is not None else 0