import pytest

from gengine.input import (
    BUTTON_COUNT,
    Input,
    InputAxisBinding,
    InputKey,
    InputMouseButton,
    InputMousePos,
    InputMouseScroll,
    KeyAction,
    KeyState,
)

KEY_W = 87
KEY_S = 83


def test_key_state_values_fixed_by_source():
    inp = Input()
    inp.on_key(KEY_W, KeyAction.PRESS)
    assert int(inp.key_state(KEY_W)) == 0b00011
    inp.update()
    assert int(inp.key_state(KEY_W)) == 0b00001
    inp.on_key(KEY_W, KeyAction.RELEASE)
    assert int(inp.key_state(KEY_W)) == 0b01100
    inp.update()
    assert int(inp.key_state(KEY_W)) == 0b00100
    inp.on_key(KEY_W, KeyAction.REPEAT)
    assert int(inp.key_state(KEY_W)) == 0b10001


def test_press_then_decay_to_down():
    inp = Input()
    inp.on_key(KEY_W, KeyAction.PRESS)
    assert inp.key_state(KEY_W) == KeyState.PRESSED
    assert inp.is_key_pressed(KEY_W)
    assert inp.is_key_down(KEY_W)
    assert not inp.is_key_up(KEY_W)
    inp.update()
    assert inp.key_state(KEY_W) == KeyState.DOWN
    assert not inp.is_key_pressed(KEY_W)
    assert inp.is_key_down(KEY_W)


def test_release_then_decay_to_up():
    inp = Input()
    inp.on_key(KEY_W, KeyAction.PRESS)
    inp.on_key(KEY_W, KeyAction.RELEASE)
    assert inp.is_key_released(KEY_W)
    assert inp.is_key_up(KEY_W)
    inp.update()
    assert inp.key_state(KEY_W) == KeyState.UP
    assert not inp.is_key_released(KEY_W)


def test_repeat_counts_as_down_and_decays():
    inp = Input()
    inp.on_key(KEY_W, KeyAction.REPEAT)
    assert inp.is_key_down(KEY_W)
    assert not inp.is_key_pressed(KEY_W)
    inp.update()
    assert inp.key_state(KEY_W) == KeyState.DOWN


def test_untouched_key_is_neither_up_nor_down():
    inp = Input()
    assert not inp.is_key_down(KEY_S)
    assert not inp.is_key_up(KEY_S)
    inp.update()
    assert inp.key_state(KEY_S) == KeyState.NONE


def test_unknown_key_ignored():
    inp = Input()
    inp.on_key(-1, KeyAction.PRESS)
    assert all(not inp.is_key_down(k) for k in range(BUTTON_COUNT))


def test_invalid_action_raises():
    inp = Input()
    with pytest.raises(ValueError):
        inp.on_key(KEY_W, 7)
    with pytest.raises(ValueError):
        inp.on_mouse_button(0, 9)


def test_out_of_range_key_raises():
    inp = Input()
    with pytest.raises(IndexError):
        inp.on_key(BUTTON_COUNT, KeyAction.PRESS)
    with pytest.raises(IndexError):
        inp.is_key_down(-5)


def test_mouse_button_states():
    inp = Input()
    inp.on_mouse_button(1, KeyAction.PRESS)
    assert inp.is_mouse_pressed(1)
    assert inp.is_mouse_down(1)
    inp.update()
    assert not inp.is_mouse_pressed(1)
    assert inp.is_mouse_down(1)
    inp.on_mouse_button(1, KeyAction.RELEASE)
    assert inp.is_mouse_released(1)
    assert inp.is_mouse_up(1)


def test_mouse_motion_offset_relative_to_previous():
    inp = Input(sensitivity=1.0)
    inp.on_mouse_pos(10, 20)
    assert inp.screen_pos == (10.0, 20.0)
    assert inp.prev_screen_pos == (10.0, 20.0)
    inp.update()
    assert inp.screen_offset == (0.0, 0.0)
    inp.on_mouse_pos(15, 20)
    assert inp.screen_offset == (5.0, 0.0)
    inp.update()
    inp.on_mouse_pos(15, 23)
    # y offset grows as the cursor moves up the screen
    assert inp.screen_offset == (0.0, -3.0)


def test_scroll_resets_on_update():
    inp = Input()
    inp.on_mouse_scroll(0, 2)
    assert inp.scroll_offset == (0.0, 2.0)
    inp.update()
    assert inp.scroll_offset == (0.0, 0.0)


def test_update_polls_events():
    calls = []
    inp = Input(poll_events=lambda: calls.append(1))
    inp.update()
    inp.update()
    assert len(calls) == 2


def test_input_action_pressed_by_key_and_scroll():
    inp = Input()
    inp.add_input_action("jump", [InputKey(KEY_W), InputMouseScroll(yaxis=True)])
    assert not inp.is_input_action_pressed("jump")
    inp.on_key(KEY_W, KeyAction.PRESS)
    assert inp.is_input_action_pressed("jump")
    inp.update()
    assert not inp.is_input_action_pressed("jump")
    inp.on_mouse_scroll(3, 0)
    assert not inp.is_input_action_pressed("jump")
    inp.on_mouse_scroll(0, -1)
    assert inp.is_input_action_pressed("jump")


def test_input_action_mouse_button():
    inp = Input()
    inp.add_input_action("fire", [InputMouseButton(0)])
    inp.on_mouse_button(0, KeyAction.PRESS)
    assert inp.is_input_action_pressed("fire")


def test_input_action_errors():
    inp = Input()
    inp.add_input_action("jump", [InputKey(KEY_W)])
    with pytest.raises(ValueError):
        inp.add_input_action("jump", [InputKey(KEY_S)])
    with pytest.raises(KeyError):
        inp.is_input_action_pressed("missing")
    with pytest.raises(TypeError):
        inp.add_input_action("look", [InputMousePos()])
    inp.remove_input_action("jump")
    with pytest.raises(KeyError):
        inp.remove_input_action("jump")


def test_axis_takes_largest_magnitude():
    inp = Input()
    inp.add_input_axis(
        "forward",
        [InputAxisBinding(InputKey(KEY_W), 1.0), InputAxisBinding(InputKey(KEY_S), -2.0)],
    )
    assert inp.get_input_axis("forward") == 0.0
    inp.on_key(KEY_W, KeyAction.PRESS)
    assert inp.get_input_axis("forward") == 1.0
    inp.on_key(KEY_S, KeyAction.PRESS)
    assert inp.get_input_axis("forward") == -2.0


def test_axis_from_scroll_and_mouse_pos():
    inp = Input(sensitivity=1.0)
    inp.add_input_axis("zoom", [InputAxisBinding(InputMouseScroll(yaxis=True), 0.5)])
    inp.add_input_axis("turn", [InputAxisBinding(InputMousePos(yaxis=False), 2.0)])
    inp.on_mouse_scroll(0, 4)
    assert inp.get_input_axis("zoom") == 2.0
    inp.on_mouse_pos(0, 0)
    inp.update()
    inp.on_mouse_pos(3, 0)
    assert inp.get_input_axis("turn") == 6.0


def test_axis_errors():
    inp = Input()
    inp.add_input_axis("a", [InputAxisBinding(InputKey(KEY_W))])
    with pytest.raises(ValueError):
        inp.add_input_axis("a", [InputAxisBinding(InputKey(KEY_S))])
    with pytest.raises(TypeError):
        inp.add_input_axis("b", [InputKey(KEY_W)])
    inp.remove_input_axis("a")
    with pytest.raises(KeyError):
        inp.get_input_axis("a")