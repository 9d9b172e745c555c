import pytest

from habitual.lib import ansi
from habitual.lib.ansi import DEFAULT, PLAIN, Theme, bold, dim, strip


@pytest.fixture(autouse=True)
def default_theme():
    ansi.use(DEFAULT)
    yield
    ansi.use(DEFAULT)


def test_theme_defaults():
    assert DEFAULT.bold == "\033[1m"
    assert DEFAULT.reset == "\033[0m"


def test_theme_colors():
    t = Theme()
    assert t.red == "\033[38;5;203m"
    assert t.green == "\033[38;5;114m"
    assert t.muted == "\033[90m"


def test_bold():
    result = bold("hi")
    assert "\033[1m" in result
    assert "hi" in result
    assert "\033[0m" in result


def test_dim():
    result = dim("hi")
    assert "\033[2m" in result
    assert "hi" in result


def test_color_wrappers():
    assert ansi.green("ok") == f"{DEFAULT.green}ok{DEFAULT.reset}"


def test_unknown_color_raises():
    with pytest.raises(AttributeError):
        ansi.ultraviolet("x")  # type: ignore[attr-defined]


def test_strip():
    assert strip(bold(ansi.gold("7 days"))) == "7 days"


def test_plain_theme_emits_no_codes():
    ansi.use(PLAIN)
    assert ansi.green("ok") == "ok"
    assert bold("ok") == "ok"
