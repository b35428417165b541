"""bc-cli learn: categories, sections, articles and bookmarks"""

import logging
from typing import TYPE_CHECKING, List, Optional

from api import content
from api.errors import ClientError
from api.models import Article, Category
from cli.prompts import select_option, wait_for_enter
from cli.templates import render_article

if TYPE_CHECKING:
    from cli.cli_app import ButlerCoffeeCLI

logger = logging.getLogger(__name__)

BOOKMARKS = "bookmarks"

# Article viewer actions
BACK = "back"
TOGGLE_BOOKMARK = "toggle_bookmark"
SHOW_RELATED = "related"


def article_label(article: Article) -> str:
    label = article.title
    if article.is_bookmarked:
        label += " [yellow]★[/yellow]"
    if article.read_time:
        label += f" [dim]({article.read_time} min)[/dim]"
    return label


def run(app: "ButlerCoffeeCLI") -> int:
    console = app.console
    while True:
        categories = content.list_categories(app.client)
        if not categories:
            console.print("No content available at this time.")
            return 0

        options = [(category.name, category) for category in categories]
        if app.is_authenticated:
            options.append(("★ My bookmarks", BOOKMARKS))

        choice = select_option(console, "What would you like to learn about?", options)
        if choice is None:
            return 0

        try:
            if choice == BOOKMARKS:
                show_bookmarks(app)
            else:
                navigate_category(app, choice)
        except ClientError as e:
            console.print(f"\n[red]Error:[/red] {e}")
            wait_for_enter(console)


def navigate_category(app: "ButlerCoffeeCLI", category: Category) -> None:
    """Sections first when the category has any, otherwise its articles directly"""
    if not content.category_has_sections(app.client, category.slug):
        navigate_articles(app, category_slug=category.slug)
        return

    while True:
        sections = content.list_category_sections(app.client, category.slug)
        if not sections:
            app.console.print("No sections available in this category.")
            return

        section = select_option(app.console, category.name, [(s.name, s) for s in sections], exit_label="← Back")
        if section is None:
            return
        navigate_articles(app, section_id=section.id)


def navigate_articles(app: "ButlerCoffeeCLI", category_slug: Optional[str] = None, section_id: Optional[str] = None) -> None:
    console = app.console
    while True:
        if section_id is not None:
            articles = content.list_section_articles(app.client, section_id)
        else:
            articles = content.list_category_articles(app.client, category_slug)

        if not articles:
            console.print("No articles available in this section.")
            return

        article = pick_article(app, articles)
        if article is None:
            return

        try:
            full_article = content.get_article(app.client, article.id)
        except ClientError as e:
            console.print(f"\n[red]Error loading article:[/red] {e}")
            wait_for_enter(console)
            continue

        # SHOW_RELATED and BACK both return to this section's article list
        view_article(app, full_article)


def pick_article(app: "ButlerCoffeeCLI", articles: List[Article]) -> Optional[Article]:
    return select_option(app.console, "Choose an article", [(article_label(a), a) for a in articles], exit_label="← Back")


def view_article(app: "ButlerCoffeeCLI", article: Article) -> str:
    """Show an article until the reader leaves it; returns the leaving action"""
    console = app.console
    while True:
        console.print(render_article(article))

        options = []
        if app.is_authenticated:
            label = "Remove bookmark" if article.is_bookmarked else "★ Bookmark this article"
            options.append((label, TOGGLE_BOOKMARK))
        options.append(("Related articles", SHOW_RELATED))

        action = select_option(console, "Actions", options, exit_label="← Back") or BACK
        if action != TOGGLE_BOOKMARK:
            return action

        try:
            bookmarked = content.toggle_bookmark(app.client, article)
        except ClientError as e:
            console.print(f"\n[red]Error toggling bookmark:[/red] {e}")
            wait_for_enter(console)
            continue

        article = article.model_copy(update={"is_bookmarked": bookmarked})
        console.print("\n[green]✓ Article bookmarked![/green]" if bookmarked else "\n[green]✓ Bookmark removed[/green]")
        wait_for_enter(console, "Press Enter to continue reading...")


def show_bookmarks(app: "ButlerCoffeeCLI") -> None:
    console = app.console
    if not app.is_authenticated:
        console.print("\nPlease login to view bookmarks.\nRun 'bc-cli login' to authenticate.")
        return

    while True:
        bookmarks = content.list_bookmarks(app.client)
        if not bookmarks:
            console.print("\nYou don't have any bookmarks yet.")
            console.print("Choose 'Bookmark this article' while reading an article to save it here!")
            return

        article = pick_article(app, [bookmark.article for bookmark in bookmarks])
        if article is None:
            return

        try:
            full_article = content.get_article(app.client, article.id)
        except ClientError as e:
            console.print(f"\n[red]Error loading article:[/red] {e}")
            wait_for_enter(console)
            continue

        view_article(app, full_article)
