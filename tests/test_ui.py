"""Tests for dialog implementations."""
import io
import threading
from unittest.mock import patch

import pytest
from rich.console import Console

from layout.core.context import RunContext, watch_input
from layout.core.errors import Interrupted, InvalidInput
from layout.ui import UI, NiceUI, SimpleUI


class TestSimpleUI:
    """Test the line-based dialog."""

    def test_implements_ui(self, make_ui):
        assert isinstance(make_ui(), UI)
        assert isinstance(NiceUI(Console(file=io.StringIO())), UI)

    def test_ask_one(self, make_ui):
        ui = make_ui("  value  \n")
        assert ui.ask_one("Name", "x") == "value"
        assert ui.out.getvalue() == "Name? [default: x] "

    def test_ask_many(self, make_ui):
        ui = make_ui("\n")
        assert ui.ask_many("Tags", ["a", "b"]) == ["a", "b"]

    def test_select_one_without_default(self, make_ui):
        with pytest.raises(InvalidInput, match="no option selected"):
            make_ui("\n").select_one("Pick", "", ["a", "b"])

    def test_select_not_a_number(self, make_ui):
        with pytest.raises(InvalidInput, match="not a number"):
            make_ui("b\n").select_one("Pick", "", ["a", "b"])

    def test_choose_many_default(self, make_ui):
        assert make_ui("\n").choose_many("Pick", ["c", "a"], ["a", "b", "c"]) == ["c", "a"]

    def test_choose_none(self, make_ui):
        assert make_ui("\n").choose_many("Pick", [], ["a"]) == []

    def test_end_of_input(self, make_ui):
        with pytest.raises(Interrupted):
            make_ui("").ask_one("Name", "")

    def test_closed_stream(self):
        stream = io.StringIO("answer\n")
        stream.close()
        with pytest.raises(Interrupted):
            SimpleUI(stream, io.StringIO()).ask_one("Name", "")

    def test_display(self, make_ui):
        ui = make_ui()
        ui.title("Hello")
        ui.info("step")
        ui.error("bad")
        assert ui.out.getvalue() == "\n\nHello\n\n[info] step\n[error] bad\n"

    def test_cancel_closes_input(self):
        ctx = RunContext()
        stream = io.StringIO("")
        thread = watch_input(ctx, stream)

        ctx.cancel()
        thread.join(timeout=5)

        assert stream.closed
        assert isinstance(thread, threading.Thread)


class TestNiceUI:
    """Test the Rich dialog with prompts stubbed out."""

    def make(self):
        out = io.StringIO()
        return NiceUI(Console(file=out, width=120)), out

    def test_ask_one(self):
        ui, _ = self.make()
        with patch("layout.ui.nice.Prompt.ask", return_value=" app ") as ask:
            assert ui.ask_one("Name", "demo") == "app"
        assert ask.call_args.kwargs["default"] == "demo"

    def test_select_by_number_or_text(self):
        ui, out = self.make()
        with patch("layout.ui.nice.Prompt.ask", return_value="2"):
            assert ui.select_one("CI", "", ["github", "gitlab"]) == "gitlab"
        with patch("layout.ui.nice.Prompt.ask", return_value="github"):
            assert ui.select_one("CI", "", ["github", "gitlab"]) == "github"
        assert "gitlab" in out.getvalue()

    def test_select_needs_exactly_one(self):
        ui, _ = self.make()
        with patch("layout.ui.nice.Prompt.ask", return_value="1,2"):
            with pytest.raises(InvalidInput):
                ui.select_one("CI", "", ["github", "gitlab"])

    def test_choose_unknown_option(self):
        ui, _ = self.make()
        with patch("layout.ui.nice.Prompt.ask", return_value="docker,k8s"):
            with pytest.raises(InvalidInput, match="k8s"):
                ui.choose_many("Features", [], ["docker", "ci"])

    @pytest.mark.parametrize("error", [EOFError, KeyboardInterrupt])
    def test_interrupted(self, error):
        ui, _ = self.make()
        with patch("layout.ui.nice.Prompt.ask", side_effect=error):
            with pytest.raises(Interrupted):
                ui.ask_many("Tags", [])

    def test_display(self):
        ui, out = self.make()
        ui.title("My layout")
        ui.info("Installing")
        ui.error("Broken")
        text = out.getvalue()
        assert "My layout" in text
        assert "Installing" in text
        assert "Broken" in text
