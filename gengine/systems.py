"""Per-frame systems: scripts, entity lifetimes and transform propagation."""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, List, Optional

import numpy as np

from .components import (
    Children,
    InterpolatedPhysics,
    Lifetime,
    LocalTransform,
    Model,
    Parent,
    ScheduledDeletion,
    Tag,
    Transform,
    quat_multiply,
    quat_slerp,
    quat_to_matrix,
)
from .scene import Entity, Scene
from .statistics import StatisticsManager

PHYSICS_STEP = 1.0 / 50.0

_log = logging.getLogger(__name__)


@dataclass
class Timestep:
    """Frame time in seconds: the real one and the one scaled by timescale and pause."""

    dt_actual: float = 0.0
    dt_effective: float = 0.0


def _stat_timer(stats: Optional[StatisticsManager], name: str, group: str) -> ContextManager:
    if stats is None:
        return contextlib.nullcontext()
    try:
        stats.get_float_stat(name)
    except KeyError:
        stats.register_float_stat(name, group)
    return stats.measure(name)


class ScriptableEntity:
    """Base class for native scripts attached to an entity."""

    def __init__(self) -> None:
        self.entity: Entity = Entity()

    @property
    def scene(self) -> Optional[Scene]:
        return self.entity.scene

    def on_create(self) -> None:
        """Called once, before the first update."""

    def on_destroy(self) -> None:
        """Hook for subclasses."""

    def on_update(self, timestep: Timestep) -> None:
        """Called every frame."""

    def get_component(self, component_type: type) -> Any:
        return self.entity.get_component(component_type)

    def has_component(self, component_type: type) -> bool:
        return self.entity.has_component(component_type)

    def create_entity(self, name: str = "") -> Entity:
        if self.entity.scene is None:
            raise ValueError("script is not attached to an entity")
        return self.entity.scene.create_entity(name)


class NativeScript:
    """Component that instantiates a script class lazily."""

    def __init__(self) -> None:
        self.instance: Optional[ScriptableEntity] = None
        self._factory: Optional[Callable[[], ScriptableEntity]] = None

    def bind(self, script_type: type, *args: Any, **kwargs: Any) -> "NativeScript":
        """Remember how to construct the script; arguments are passed on."""
        self._factory = lambda: script_type(*args, **kwargs)
        return self

    def instantiate(self) -> ScriptableEntity:
        if self._factory is None:
            raise RuntimeError("no script bound")
        return self._factory()

    def destroy(self) -> None:
        """Drop the script instance."""
        self.instance = None


class LifetimeSystem:
    """Counts down lifetimes and deletes scheduled entities with their children."""

    def update(self, scene: Scene, timestep: Timestep) -> None:
        for entity in scene.view(Lifetime):
            lifetime = entity.get_component(Lifetime)
            if lifetime.active:
                lifetime.remaining_seconds -= timestep.dt_effective
                if lifetime.remaining_seconds <= 0:
                    entity.destroy()

        doomed: List[Entity] = []
        for entity in scene.view(ScheduledDeletion):
            self._collect(entity, doomed)
        for entity in doomed:
            if entity in scene:
                scene.destroy(entity)

    def _collect(self, entity: Entity, doomed: List[Entity]) -> None:
        doomed.append(entity)
        tag = entity.try_get_component(Tag)
        _log.debug("Killing entity %s, %s", entity.handle, tag.tag if tag else "")
        children = entity.try_get_component(Children)
        if children is not None:
            for child in children:
                self._collect(child, doomed)


class ScriptSystem:
    """Creates and updates native scripts."""

    def __init__(self, statistics: Optional[StatisticsManager] = None) -> None:
        self._statistics = statistics

    def init_scene(self, scene: Scene) -> None:
        """Destroy script instances when their component goes away."""
        scene.on_destroy(
            NativeScript, lambda _scene, entity: entity.get_component(NativeScript).destroy()
        )

    def update(self, scene: Scene, timestep: Timestep) -> None:
        with _stat_timer(self._statistics, "ScriptUpdate", "CPU"):
            for entity in scene.view(NativeScript):
                script = entity.get_component(NativeScript)
                if script.instance is None:
                    script.instance = script.instantiate()
                    script.instance.entity = entity
                    script.instance.on_create()
                script.instance.on_update(timestep)


class TransformSystem:
    """Propagates parent transforms, refreshes model matrices and steps physics."""

    def __init__(
        self,
        physics_step: float = PHYSICS_STEP,
        simulate: Optional[Callable[[Timestep], None]] = None,
        statistics: Optional[StatisticsManager] = None,
    ) -> None:
        self.physics_step = physics_step
        self._simulate = simulate
        self._statistics = statistics

    def update(self, scene: Scene, timestep: Timestep) -> None:
        with _stat_timer(self._statistics, "TransformUpdate", "CPU"):
            self._update_local_transforms(scene)
            self._update_models(scene)
            self._update_interpolated(scene, timestep)
        if self._simulate is not None:
            with _stat_timer(self._statistics, "PhysicsSimulate", "CPU"):
                self._simulate(timestep)

    @staticmethod
    def _update_local_transforms(scene: Scene) -> None:
        entities = sorted(
            scene.view(Transform, LocalTransform, Parent),
            key=lambda e: e.hierarchy_height(),
            reverse=True,
        )
        for entity in entities:
            world = entity.get_component(Transform)
            local = entity.get_component(LocalTransform).transform
            parent = entity.get_component(Parent).entity.get_component(Transform)
            local_dirty = local.dirty
            if local_dirty:
                local.mark_clean()
            if parent.dirty or local_dirty:
                offset = local.translation * parent.scale
                rotated = quat_to_matrix(parent.rotation)[:3, :3] @ offset
                world.translation = rotated + parent.translation
                world.scale = local.scale * parent.scale
                world.rotation = quat_multiply(local.rotation, parent.rotation)

    @staticmethod
    def _update_models(scene: Scene) -> None:
        for entity in scene.view(Transform, Model):
            if entity.has_component(InterpolatedPhysics):
                continue
            transform = entity.get_component(Transform)
            if transform.dirty:
                entity.get_component(Model).matrix = transform.model_matrix()
                transform.mark_clean()

    def _update_interpolated(self, scene: Scene, timestep: Timestep) -> None:
        for entity in scene.view(Model, Transform, InterpolatedPhysics):
            model = entity.get_component(Model)
            transform = entity.get_component(Transform)
            interp = entity.get_component(InterpolatedPhysics)
            transform.mark_clean()
            if interp.time_since_update < 0:
                if interp.time_since_update == -1:
                    model.matrix = transform.model_matrix()
                continue
            amount = min(max(interp.time_since_update / self.physics_step, 0.0), 1.0)
            prev = np.asarray(interp.prev_pos, dtype=float)
            blended = Transform(
                translation=prev + (transform.translation - prev) * amount,
                rotation=quat_slerp(interp.prev_rot, transform.rotation, amount),
                scale=transform.scale,
            )
            model.matrix = blended.model_matrix()
            interp.time_since_update += timestep.dt_effective