import logging

from data.config import config
from misc.utils import notify
from stream_resolver import (
    DownloadResolver,
    EndpointRegistry,
    FailoverController,
    OpusCapability,
    ServiceClass,
    StreamResolver,
    StreamSelector,
    URLRewriter,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)-5.5s]  %(message)s",
                    handlers=[
                        logging.StreamHandler()
                    ])
logging.getLogger('aiohttp').setLevel(logging.WARNING)

instances = config["instances"]
player = config["player"]

registry = EndpointRegistry.initialize(
    {
        ServiceClass.STREAM_PROXY: instances["piped"],
        ServiceClass.PLAYLIST_PROXY: instances["invidious"],
    },
    hls_mirror=instances["hls"] or None,
    mirror_file=instances["file"] or None,
)

opus_capability = OpusCapability.fixed(player["supports_opus"])

stream_resolver = StreamResolver(
    StreamSelector(opus_capability),
    stable_volume_preferred=player["stable_volume"],
    quality=player["quality"],
    codec=player["codec"],
)

rewriter = URLRewriter(
    registry,
    enforce_proxy=player["enforce_proxy"],
    custom_instance=player["custom_instance"],
    link_host=config["links"]["host"],
    page_origin=config["links"]["origin"],
)

failover = FailoverController(registry, notify=notify)
playlist_failover = FailoverController(registry, notify=notify, service_class=ServiceClass.PLAYLIST_PROXY)

download_resolver = DownloadResolver(notify=notify)
