import pytest

from tests.utils import make_graph, module_id
from tui.layout import compute_layout
from tui.render import render_error, render_graph, wrap_messages
from tui.screen import Screen, Vector
from tui.state import RenderState, SpatialState

LONG_ERROR = (
    "this is a very long error that probably does not fit in just one line, "
    "so it will be split in multiple lines"
)


def _render_errors(errors: list[str], size: Vector) -> Screen:
    screen = Screen(size)
    render_state = RenderState(selected_id="selected", errors={"selected": errors})
    render_error(screen, render_state, SpatialState(screen_size=size))
    return screen


def test_render_error__on_short_error__writes_first_row_and_blanks_the_rest() -> None:
    screen = _render_errors(["this is an error"], Vector(60, 3))

    assert screen.lines() == ["this is an error".ljust(60), " " * 60, " " * 60]


def test_render_error__on_long_error__wraps_on_word_boundaries() -> None:
    screen = _render_errors([LONG_ERROR], Vector(60, 10))

    lines = screen.lines()
    assert lines[0] == "this is a very long error that probably does not fit in just"
    assert lines[1] == "one line, so it will be split in multiple lines".ljust(60)
    assert lines[2:] == [" " * 60] * 8


def test_render_error__repaint_overwrites_previous_content() -> None:
    screen = _render_errors([LONG_ERROR], Vector(60, 10))
    first = screen.lines()

    render_state = RenderState(selected_id="selected", errors={"selected": ["short"]})
    render_error(screen, render_state, SpatialState(screen_size=Vector(60, 10)))
    render_state.errors["selected"] = [LONG_ERROR]
    render_error(screen, render_state, SpatialState(screen_size=Vector(60, 10)))

    assert screen.lines() == first


def test_render_error__on_overflow__truncates_with_ellipsis() -> None:
    screen = _render_errors([LONG_ERROR, "second error"], Vector(20, 3))

    lines = screen.lines()
    assert len(lines) == 3
    assert lines[2].rstrip().endswith("...")
    assert all(len(line) == 20 for line in lines)


def test_render_error__hard_splits_words_longer_than_a_row() -> None:
    screen = _render_errors(["x" * 25], Vector(10, 3))

    assert screen.lines() == ["x" * 10, "x" * 10, "x" * 5 + " " * 5]


def test_render_error__each_message_starts_a_new_row() -> None:
    screen = _render_errors(["first", "second"], Vector(20, 3))

    assert [line.rstrip() for line in screen.lines()] == ["first", "second", ""]


@pytest.mark.parametrize(
    "messages, width, expected",
    [
        (["a b c"], 3, ["a b", "c"]),
        (["no-break-on-hyphens"], 10, ["no-break-o", "n-hyphens"]),
        ([""], 10, [""]),
    ],
)
def test_wrap_messages(messages: list[str], width: int, expected: list[str]) -> None:
    assert wrap_messages(messages, width) == expected


def test_render_graph__marks_errors_and_highlights_cursor() -> None:
    graph = make_graph(
        [("main.py", "a.py"), ("main.py", "b.py")], errors={"b.py": ["line 1: boom"]}
    )
    render_state = RenderState(
        selected_id=module_id("main.py"),
        cursor_id=module_id("a.py"),
        errors={module_id("b.py"): ["line 1: boom"]},
    )
    spatial_state = compute_layout(graph, render_state, Vector(30, 5), indent=2)
    screen = Screen(Vector(30, 5))
    screen.write(0, 4, "stale content")

    render_graph(screen, graph, render_state, spatial_state)

    assert [line.rstrip() for line in screen.lines()] == [
        " main.py",
        "   a.py",
        "  !b.py",
        "",
        "",
    ]
    assert screen.get_content(0, 1).bg == "cyan"
    assert screen.get_content(29, 1).bg == "cyan"
    assert screen.get_content(0, 0).bg == "default"
