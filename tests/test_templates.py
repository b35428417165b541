"""Tests for rendering helpers and order configuration."""

from unittest.mock import patch

import pytest
from rich.console import Console

from api.models import Article, AvailablePlan
from cli import order_config, templates


def render(renderable) -> str:
    console = Console(record=True, width=130, force_terminal=False)
    console.print(renderable)
    return console.export_text()


class TestMarkers:
    """Tests for inline description markers."""

    def test_known_markers_become_markup(self):
        """Should translate each marker to its rich style."""
        assert templates.render_markers('Try {{highlight "single origin"}} now') == (
            "Try [bold cyan]single origin[/bold cyan] now"
        )
        assert templates.render_markers('{{faint "x"}}') == "[dim]x[/dim]"

    def test_unknown_markers_are_kept(self):
        """Should leave unknown marker names untouched."""
        assert templates.render_markers('{{blink "x"}}') == '{{blink "x"}}'

    def test_brackets_are_escaped(self):
        """Should print literal brackets from CMS text."""
        rendered = templates.render_description('[not markup] {{bold "ok"}}')
        assert rendered.plain == "[not markup] ok"

    def test_plain_description(self):
        """Should pass text without markers straight through."""
        assert templates.render_description("Just coffee [x]").plain == "Just coffee [x]"


class TestProgressBar:
    """Tests for the allocation progress bar."""

    @pytest.mark.parametrize(
        "current,total,expected_filled",
        [(0, 5, 0), (2, 4, 15), (5, 5, 30), (7, 5, 30)],
    )
    def test_fill(self, current, total, expected_filled):
        """Should fill proportionally and never overflow."""
        bar = templates.progress_bar(current, total)
        assert len(bar) == 30
        assert bar.count("█") == expected_filled

    def test_zero_total(self):
        """Should render an empty bar for a zero total."""
        assert templates.progress_bar(1, 0) == "░" * 30


class TestRenderables:
    """Tests for summary and detail panels."""

    def test_order_summary(self):
        """Should show tier, total, price and each preparation line."""
        text = render(templates.render_order_summary(
            "Explorer", 3, "EUR", 76.5, "month", ["2 → Whole beans for Espresso", "1 → Ground for V60 Pour Over (medium)"]
        ))
        assert "Explorer" in text
        assert "Total: 3 kg/month" in text
        assert "EUR 76.50/month" in text
        assert "2. 1 → Ground for V60 Pour Over (medium)" in text

    def test_plan_details(self):
        """Should render price, description and features."""
        plan = AvailablePlan(
            name="Explorer",
            price="25.50",
            currency="EUR",
            billing_period="month",
            description='A {{highlight "rotating"}} selection',
            features=["Free shipping"],
        )
        text = render(templates.render_plan_details(plan))
        assert "EUR 25.50/month" in text
        assert "A rotating selection" in text
        assert "• Free shipping" in text

    def test_article(self):
        """Should show author, read time and content."""
        article = Article(title="Dialing in", author="Ana", read_time=4, content="Grind **finer**.", is_bookmarked=True)
        text = render(templates.render_article(article))
        assert "Dialing in" in text
        assert "By Ana" in text
        assert "4 min read" in text
        assert "Grind finer." in text

    def test_about(self):
        """Should render the about text without marker syntax."""
        text = render(templates.render_about())
        assert "Our First Principle" in text
        assert "{{" not in text


class TestOrderConfig:
    """Tests for brewing method descriptions and preference flows."""

    def test_display_and_grind(self):
        """Should map known methods and pass unknown ones through."""
        assert order_config.brewing_method_display("moka") == "Moka Pot"
        assert order_config.grind_description("cold_brew") == "extra coarse"
        assert order_config.brewing_method_display("siphon") == "siphon"
        assert order_config.grind_description("siphon") == ""

    def test_format_line_item(self):
        """Should describe whole bean and ground items differently."""
        assert order_config.format_line_item(2, "whole_bean", "espresso") == "2 → Whole beans for Espresso"
        assert order_config.format_line_item(1, "ground", "french_press") == "1 → Ground for French Press (coarse)"

    @pytest.mark.parametrize("remaining,expected", [(5, 2), (2, 2), (1, 1)])
    def test_default_preference_quantity(self, remaining, expected):
        """Should default to 2 kg, or whatever remains if less."""
        assert order_config.default_preference_quantity(remaining) == expected

    def test_split_allocates_full_quantity(self):
        """Should keep asking until the total is allocated."""
        console = Console(record=True, width=100)
        with patch.object(order_config, "prompt_quantity", side_effect=[2, 1]), \
                patch.object(order_config, "select_grind_type", side_effect=["ground", "whole_bean"]), \
                patch.object(order_config, "select_brewing_method", side_effect=["v60", "espresso"]):
            items = order_config.configure_line_items(console, 3)

        assert [(i.quantity, i.grind_type, i.brewing_method) for i in items] == [
            (2, "ground", "v60"),
            (1, "whole_bean", "espresso"),
        ]
        assert "allocated all 3" in console.export_text()

    def test_single_unit_skips_split_question(self):
        """Should go straight to a uniform order for one unit."""
        console = Console(record=True, width=100)
        with patch.object(order_config, "prompt_confirm") as confirm, \
                patch.object(order_config, "select_grind_type", return_value="whole_bean"), \
                patch.object(order_config, "select_brewing_method", return_value="drip"):
            items = order_config.configure_preferences(console, 1)

        confirm.assert_not_called()
        assert len(items) == 1
        assert items[0].quantity == 1
