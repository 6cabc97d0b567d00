from typing import Optional


def parse_html_source_url(html: bytes) -> Optional[str]:
    """Pull the ``SourceURL:`` header out of a CF_HTML payload."""
    header = html.split(b"<", 1)[0].decode("utf-8", errors="ignore")
    for line in header.splitlines():
        if line.startswith("SourceURL:"):
            url = line[len("SourceURL:"):].strip()
            return url or None
    return None
