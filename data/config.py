import os
from json import loads as json_loads

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())

# Ordered by reliability, most preferred first
DEFAULT_COBALT_INSTANCES = [
    "https://sunny.imput.net",
    "https://nachos.imput.net",
    "https://kityune.imput.net",
    "https://blossom.imput.net",
    "https://cobalt-backend.canine.tools",
    "https://capi.3kh0.net",
    "https://noodle.imput.net",
    "https://cobalt.api.timelessnesses.me",
    "https://olly.imput.net",
    "https://downloadapi.stuff.solutions",
    "https://cobalt-7.kwiatekmiki.com",
]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


config = {
    "instances": {
        "piped": json_loads(os.getenv("PIPED_INSTANCES", "[]")),
        "hls": os.getenv("HLS_INSTANCE", ""),
        "invidious": json_loads(os.getenv("INVIDIOUS_INSTANCES", "[]")),
        "file": os.getenv("INSTANCES_FILE", ""),
    },
    "download": {
        "instances": json_loads(os.getenv("COBALT_INSTANCES", "null")) or DEFAULT_COBALT_INSTANCES,
        "format": os.getenv("DOWNLOAD_FORMAT", "opus"),
        "request_timeout": float(os.getenv("DOWNLOAD_REQUEST_TIMEOUT", "10")),
        "probe_timeout": float(os.getenv("DOWNLOAD_PROBE_TIMEOUT", "5")),
        "user_agent": os.getenv("DOWNLOAD_USER_AGENT", "Ytify-App/1.0"),
    },
    "player": {
        "quality": os.getenv("QUALITY", "medium"),
        "codec": os.getenv("CODEC", "any"),
        "stable_volume": _env_flag("STABLE_VOLUME"),
        "enforce_proxy": _env_flag("ENFORCE_PROXY"),
        "custom_instance": _env_flag("CUSTOM_INSTANCE"),
        "supports_opus": _env_flag("SUPPORTS_OPUS", "true"),
    },
    "links": {
        "host": os.getenv("LINK_HOST", ""),
        "origin": os.getenv("APP_ORIGIN", ""),
    },
}
