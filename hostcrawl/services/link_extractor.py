from typing import Callable, List, Optional

from bs4 import BeautifulSoup


class LinkExtractor:
    """HTML text -> ordered, de-duplicated raw href strings from `<a href>` tags.

    Pure: no URL resolution or filtering happens here.
    """

    def __init__(self, soup_factory: Optional[Callable[[str], BeautifulSoup]] = None):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def extract_links(self, html: str) -> List[str]:
        soup = self._soup_factory(html)
        hrefs = []
        seen = set()
        for a in soup.find_all("a", href=True):
            href = a.get("href")
            if isinstance(href, list):
                href = href[0] if href else ""
            href = (href or "").strip()
            if not href or href in seen:
                continue
            seen.add(href)
            hrefs.append(href)
        return hrefs
