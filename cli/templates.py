"""Rich renderables for catalog, order and article output

Descriptions coming from the backend CMS may contain inline markers such as
``{{highlight "single origin"}}``; :func:`render_markers` turns those into
rich markup so they can be printed directly.
"""

import re
from typing import List, Optional, Sequence

from rich.console import Group, RenderableType
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from api.models import Article, AvailablePlan, Subscription
from utils.text import format_timestamp, get_terminal_width, wrap_text

MARKER_STYLES = {
    "highlight": "bold cyan",
    "bold": "bold",
    "emphasis": "italic grey62",
    "section": "bold orange1",
    "faint": "dim",
    "cyan": "cyan",
    "green": "green",
    "yellow": "yellow",
    "red": "red",
}

MARKER_PATTERN = re.compile(r'\{\{\s*(\w+)\s+"((?:[^"\\]|\\.)*)"\s*\}\}')

PROGRESS_BAR_WIDTH = 30


def render_markers(text: str) -> str:
    """Convert ``{{style "text"}}`` markers to rich markup

    Everything outside a known marker is escaped, so stray brackets in CMS
    content are printed literally. Unknown marker names are left untouched.
    """
    parts = []
    position = 0
    for match in MARKER_PATTERN.finditer(text):
        name, content = match.group(1), match.group(2)
        style = MARKER_STYLES.get(name)
        if style is None:
            continue
        parts.append(escape(text[position:match.start()]))
        content = content.replace('\\"', '"').replace("\\n", "\n")
        parts.append(f"[{style}]{escape(content)}[/{style}]")
        position = match.end()
    parts.append(escape(text[position:]))
    return "".join(parts)


def render_description(description: str) -> Text:
    """Description as a rich Text, with markers rendered when present"""
    if "{{" not in description:
        return Text(description)
    return Text.from_markup(render_markers(description))


def readable_width() -> int:
    """Terminal width minus margins, kept between 60 and 120 columns"""
    return min(max(int(get_terminal_width() * 0.9), 60), 120)


def progress_bar(current: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    if total <= 0:
        return "░" * width
    filled = min(int(current / total * width), width)
    return "█" * filled + "░" * (width - filled)


def render_progress(current: int, total: int) -> Panel:
    line = f"Progress: {progress_bar(current, total)} {current}/{total} kg"
    if current >= total:
        line += " [green]✓[/green]"
    return Panel(line, expand=False)


def render_preference_header(preference_num: int, total_quantity: int, remaining: int, low_remaining: bool) -> Panel:
    remaining_line = f"Remaining: {remaining} kg"
    if low_remaining:
        remaining_line += " [yellow]⚠ (almost done!)[/yellow]"
    return Panel(
        f"Allocating from: {total_quantity} kg total\n{remaining_line}",
        title=f"Preference #{preference_num}",
        title_align="left",
        expand=False,
    )


def render_order_summary(
    name: str,
    total_quantity: int,
    currency: str,
    total_price: float,
    billing_period: str,
    line_items: Sequence[str],
    notes: Optional[str] = None,
) -> Panel:
    """Summary box shown before checkout"""
    price = f"{currency} {total_price:.2f}"
    if billing_period:
        price += f"/{billing_period}"
        total_line = f"Total: {total_quantity} kg/month"
    else:
        total_line = f"Quantity: {total_quantity}"

    lines = [
        f"[bold]{escape(name)}[/bold]",
        total_line,
        f"Price: {price}",
        "",
        "How your coffee will be prepared:",
    ]
    lines.extend(f"   {index}. {escape(item)}" for index, item in enumerate(line_items, start=1))
    if notes:
        lines.append(f"   Notes: {escape(notes)}")

    return Panel("\n".join(lines), title="Your Order Summary", title_align="left", expand=False)


def render_plan_details(plan: AvailablePlan, active: Optional[Subscription] = None) -> Panel:
    """Detail panel for a subscription tier or a one-time product"""
    price = f"{plan.currency} {plan.price}"
    if plan.billing_period:
        price += f"/{plan.billing_period}"

    body: List[RenderableType] = [Text.from_markup(f"[bold]Price:[/bold] {escape(price)}"), Text("")]
    if plan.description:
        body.append(render_description(wrap_text(plan.description, readable_width())))

    if active is not None and active.id:
        status = active.status.upper()
        if active.status == "active":
            status += " ✓"
        body.extend([Text(""), Text(f"Status: {status}")])
        if active.started_at:
            body.append(Text(f"Started: {format_timestamp(active.started_at)}"))

    if plan.features:
        body.extend([Text(""), Text("Features:", style="bold")])
        body.extend(Text(f"  • {feature}") for feature in plan.features)

    return Panel(Group(*body), title=f"[bold cyan]{escape(plan.name)}[/bold cyan]", title_align="left")


def render_article(article: Article) -> Panel:
    """Article metadata line followed by its Markdown content"""
    meta = []
    if article.author:
        meta.append(f"[dim]By[/dim] [cyan]{escape(article.author)}[/cyan]")
    if article.read_time:
        meta.append(f"{article.read_time} [dim]min read[/dim]")
    if article.published_at:
        meta.append(format_timestamp(article.published_at, "%Y-%m-%d"))

    body: List[RenderableType] = []
    if meta:
        body.append(Text.from_markup(" [dim]•[/dim] ".join(meta)))
    if article.tags:
        body.append(Text.from_markup(f"[dim]Tags:[/dim] [cyan]{escape(article.tags)}[/cyan]"))
    if body:
        body.append(Text(""))

    if "{{" in article.content:
        body.append(render_description(article.content))
    else:
        body.append(Markdown(article.content))

    title = escape(article.title)
    if article.is_bookmarked:
        title += " [yellow]★[/yellow]"
    return Panel(Group(*body), title=f"[bold]{title}[/bold]", title_align="left", width=readable_width())


def divider(title: str = "") -> Rule:
    return Rule(title, style="dim")


ABOUT_TEXT = """
At Butler Coffee we keep things simple: we only share what we genuinely love, and we have fun doing it.

{{section "Our First Principle"}}

{{highlight "We only offer what we like"}}: nothing goes on our stock unless we'd happily drink it ourselves. Every coffee, machine, and product we offer has been tested, tasted and enjoyed by us first. If it doesn't meet our own standards, it never makes it to yours.

{{section "Our Second Principle"}}

Just as important: {{highlight "we should enjoy the ride"}}. That means we sometimes try ideas that don't make much sense on paper, simply because they make us smile. Coffee is meant to be enjoyed, and we want that spirit to show through everything we do.

{{section "What We Do"}}

Today, we focus on bringing high-quality specialty coffee to both homes and workplaces through curated subscriptions and office setups offering beans from all around the world. Whether it's a single bag or a full machine solution, our goal is to deliver products that make your daily coffee something worth looking forward to.

{{emphasis "Our end goal is to make you make good coffee."}}

{{faint "Made with ☕ and love · butler.coffee"}}
"""


def render_about() -> Panel:
    return Panel(
        render_description(wrap_text(ABOUT_TEXT.strip("\n"), readable_width() - 4)),
        title="[bold]☕ About Butler Coffee[/bold]",
        title_align="left",
        width=readable_width(),
    )
