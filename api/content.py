"""Knowledge content: categories, sections, articles and bookmarks"""

from typing import List, Optional, TYPE_CHECKING

from .errors import ClientError
from .models import Article, Bookmark, Category, Envelope, Page, Section, unwrap

if TYPE_CHECKING:
    from .client import ApiClient

CONTENT_PATH = "/api/core/v1/content"


def list_categories(client: "ApiClient") -> List[Category]:
    """Published categories (first page of results)"""
    result = client.request("GET", f"{CONTENT_PATH}/categories/", model=Envelope[Page[Category]])
    page = unwrap(result)
    return page.results if page is not None else []


def get_category(client: "ApiClient", slug: str) -> Category:
    result = client.request("GET", f"{CONTENT_PATH}/categories/{slug}/", model=Envelope[Category])
    category = unwrap(result)
    if category is None:
        raise ClientError(f"category not found: {slug}")
    return category


def list_category_sections(client: "ApiClient", category_slug: str) -> List[Section]:
    result = client.request("GET", f"{CONTENT_PATH}/categories/{category_slug}/sections/", model=Envelope[List[Section]])
    return unwrap(result, [])


def list_category_articles(client: "ApiClient", category_slug: str) -> List[Article]:
    """Articles in the category's default section"""
    result = client.request("GET", f"{CONTENT_PATH}/categories/{category_slug}/articles/", model=Envelope[List[Article]])
    return unwrap(result, [])


def list_section_articles(client: "ApiClient", section_id: str) -> List[Article]:
    result = client.request("GET", f"{CONTENT_PATH}/sections/{section_id}/articles/", model=Envelope[List[Article]])
    return unwrap(result, [])


def get_article(client: "ApiClient", article_id: str) -> Article:
    """Full article including markdown content

    Sent authenticated when possible so ``is_bookmarked`` is populated.
    """
    result = client.request(
        "GET",
        f"{CONTENT_PATH}/articles/{article_id}/",
        require_auth=client.credentials.is_authenticated(),
        model=Envelope[Article],
    )
    article = unwrap(result)
    if article is None:
        raise ClientError(f"article not found: {article_id}")
    return article


def list_bookmarks(client: "ApiClient") -> List[Bookmark]:
    result = client.request("GET", f"{CONTENT_PATH}/bookmarks/", require_auth=True, model=Envelope[List[Bookmark]])
    return unwrap(result, [])


def create_bookmark(client: "ApiClient", article_id: str) -> Optional[Bookmark]:
    result = client.request(
        "POST",
        f"{CONTENT_PATH}/bookmarks/",
        body={"article_id": article_id},
        require_auth=True,
        model=Envelope[Bookmark],
    )
    return unwrap(result)


def delete_bookmark(client: "ApiClient", bookmark_id: str) -> None:
    """Remove a bookmark; the API answers 204 No Content"""
    response = client.execute("DELETE", f"{CONTENT_PATH}/bookmarks/{bookmark_id}/", require_auth=True)
    if response.status_code != 204:
        client.decode(response)


def category_has_sections(client: "ApiClient", category_slug: str) -> bool:
    return len(list_category_sections(client, category_slug)) > 0


def toggle_bookmark(client: "ApiClient", article: Article) -> bool:
    """Bookmark the article, or remove its bookmark

    Returns:
        True if the article is bookmarked afterwards
    """
    if not client.credentials.is_authenticated():
        raise ClientError("you need to login to bookmark articles. Run 'bc-cli login' to authenticate")

    if not article.is_bookmarked:
        create_bookmark(client, article.id)
        return True

    for bookmark in list_bookmarks(client):
        if bookmark.article_id == article.id:
            delete_bookmark(client, bookmark.id)
            return False
    raise ClientError("bookmark not found")
