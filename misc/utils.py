import logging
import re
from typing import Optional

_id_regex = re.compile(
    r"(https?://)?((www\.)?(youtube(-nocookie)?|youtube\.googleapis)\.com.*"
    r"(v/|v=|vi=|vi/|e/|embed/|user/.*/u/\d+/)|youtu\.be/)([_0-9a-z-]+)",
    re.IGNORECASE,
)


def id_from_url(link: Optional[str]) -> Optional[str]:
    if not link:
        return None
    match = _id_regex.search(link)
    return match.group(7) if match else None


def notify(text: str) -> None:
    logging.warning(f'Notification: {text}')
