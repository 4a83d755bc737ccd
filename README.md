# gengine

Building blocks for a small game engine, in plain Python with numpy. The
package has no renderer and no window. It covers:

- **Console variables** (`gengine.cvar`). `CVarSystem` holds float, string and
  vec3 variables, registered with `register_float`, `register_string` and
  `register_vec3`. A variable can have a range (numbers are clamped to it),
  flags (`CVarFlag`), and a callback that runs with the name and new value
  before the value changes. `set_parse` parses command text and sets the
  variable from it. `AutoCVar` registers a variable when it is created, with a
  type that follows its default. `get_cvar_system()` returns a registry shared
  by the whole process.
- **Command parser** (`gengine.parser`). `CommandParser` splits a command line
  into atoms: an `Identifier`, a float, a double-quoted string (backslash
  escapes the next character) or a three-component vector in `{}`, `[]` or
  `()`. Input it cannot read raises `ParseError`, which carries `where` and
  `what`.
- **Console** (`gengine.console`). `Console` runs command lines against the
  commands and console variables it knows about. It keeps a log of `LogEntry`
  values, each with a colour, and an input history you can step through with
  `history_previous` and `history_next`. `autocomplete_candidates` lists the
  names that match some text. It comes with the commands `find`, `Lua`, `set`
  and `findall`. It also registers the `c.inputColor` and `c.textColor`
  variables. Typing the name of a variable on its own logs its description.
  Typing the name followed by a value sets it.
- **Statistics** (`gengine.statistics`). `StatBuffer` keeps the last N values
  and gives sum, mean, variance, standard deviation, minimum and maximum.
  `StatisticsManager` keeps named stats in groups. Its `summary()` sorts each
  group by maximum. Its `measure(name)` context manager records in milliseconds
  how long a block took.
- **Geometry.** `gengine.frustum` has `Frustum` with `is_point_inside` and
  `is_box_inside` (for an `AABB`), which return a `Visibility`.
  `gengine.camera` has `View`, a camera with pitch and yaw, and `look_at`.
- **Components** (`gengine.components`). These are `Tag`, `Lifetime`,
  `ScheduledDeletion`, `Transform` (it tracks when it has changed), `Model`,
  `Parent`, `Children`, `LocalTransform` and `InterpolatedPhysics`. The module
  also has the quaternion helpers `quat_to_matrix`, `quat_multiply` and
  `quat_slerp`.
- **Scene** (`gengine.scene`). `Scene` and `Entity` store components, look up
  entities with `view`, and call back when a component is destroyed. They
  keep track of parent and child links, turn down links that would form a
  cycle, and cache the height of each subtree.
- **Systems** (`gengine.systems`). Each of these updates a scene once per
  `Timestep`:
  - `LifetimeSystem` counts lifetimes down. It deletes entities scheduled for
    deletion, together with their children.
  - `ScriptSystem` creates and updates scripts. A script subclasses
    `ScriptableEntity` and is attached to an entity through a `NativeScript`
    component.
  - `TransformSystem` passes parent transforms down to their children and
    refreshes model matrices. It blends interpolated bodies between steps and
    calls an optional `simulate` callback.
- **Input** (`gengine.input`). `Input` takes events from a window system through
  `on_key`, `on_mouse_pos`, `on_mouse_scroll` and `on_mouse_button`. It tracks
  key and button state frame by frame and maps named actions and axes to
  bindings.
- **Logging sinks** (`gengine.log_sinks`). `init_logging(console, directory)`
  sets up a "default" logger. It writes to the console through
  `ConsoleHandler`, to standard output, and to a timestamped file. It also
  registers these console commands:
  - `SetFileSinkLevel`
  - `SetConsoleSinkLevel`
  - `SetStdoutSinkLevel`
  - `PrintLogLevels`

  `make_universal_logger(name)` gives further loggers that use the same three
  sinks.

## Installing

```
pip install .
```

## Examples

Parsing a command:

```python
from gengine.parser import CommandParser

atoms = list(CommandParser("set c.textColor {1 0.5 0}"))
# [Identifier(name='set'), Identifier(name='c.textColor'), (1.0, 0.5, 0.0)]
```

Console variables:

```python
from gengine.cvar import CVarSystem

cvars = CVarSystem()
cvars.register_float("timescale", "Engine timescale", 1.0, minimum=0.0001, maximum=1000)
cvars.set_parse("timescale", "5000")
cvars.get("timescale")   # 1000.0, clamped to the range
```

Running commands in a console:

```python
from gengine.console import Console

console = Console(cvars)
console.register_command("hello", "- Says hello", lambda args: console.log("hello %s", args))
console.execute_command("hello world")
console.entries[-1].text   # 'hello world'
```

A scene with a lifetime:

```python
from gengine.components import Lifetime
from gengine.scene import Scene
from gengine.systems import LifetimeSystem, Timestep

scene = Scene("default scene")
spark = scene.create_entity("spark")
spark.add_component(Lifetime(remaining_seconds=0.5, active=True))
LifetimeSystem().update(scene, Timestep(dt_actual=1.0, dt_effective=1.0))
len(scene)   # 0
```

## What it does not do

The package has no main loop. It does not run frames, measure frame time,
apply a timescale or pause, so you call the systems yourself with a
`Timestep`. For the same reason it has none of the `exit`, `quit`, `help` and
`clear` console commands and no `timescale` variable. Register your own with
`Console.register_command` and `CVarSystem.register_float` if you want them.

It also leaves out rendering, windows, a physics simulator and on-screen drawing
of the console or the statistics. Render views are plain objects with a
`camera` attribute, and physics stepping goes through the callback you hand to
`TransformSystem`.

## Tests

```
pip install .[test]
pytest
```