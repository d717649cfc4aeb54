"""Server-rendered SEO artifacts: public quiz summary page and sitemap."""
from html import escape
from typing import List
from xml.sax.saxutils import escape as xml_escape

import config

STATIC_PAGES = [
    ("/", 1.0),
    ("/en/", 0.8),
    ("/it/", 0.8),
]
QUIZ_PAGE_PRIORITY = 0.6


def render_quiz_page(quiz: dict, categories: List[dict], url: str) -> str:
    title = quiz.get("title") or "Quiz Jeopardy"
    description = f"Gioca al quiz: {title}. Contiene {len(categories)} categorie."
    items = "".join(
        f"<li>{escape(str(c.get('position', i)))}. {escape(str(c.get('title', '')))}</li>"
        for i, c in enumerate(categories, start=1)
    )
    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>{escape(title)}</title>
    <meta name="description" content="{escape(description)}" />
    <meta property="og:title" content="{escape(title)}" />
    <meta property="og:description" content="{escape(description)}" />
    <meta property="og:url" content="{escape(url)}" />
  </head>
  <body>
    <h1>{escape(title)}</h1>
    <p>{escape(description)}</p>
    <ul>
      {items}
    </ul>
  </body>
</html>"""


def sitemap_urls(quizzes: List[dict]) -> List[tuple]:
    urls = [(f"{config.SITE_URL}{path}", priority) for path, priority in STATIC_PAGES]
    urls.extend((f"{config.SITE_URL}/quiz/{q['id']}", QUIZ_PAGE_PRIORITY) for q in quizzes if q.get("id"))
    return urls


def render_sitemap(quizzes: List[dict]) -> str:
    entries = "\n".join(
        f"  <url>\n    <loc>{xml_escape(loc)}</loc>\n    <priority>{priority}</priority>\n  </url>"
        for loc, priority in sitemap_urls(quizzes)
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{entries}\n"
        "</urlset>"
    )
