from enum import Enum
from typing import Optional

from anistream.utils.logger import api_logger

# ===========================
# Streaming Server Enum
# ===========================
class StreamingServer(str, Enum):
    asianload = "asianload"
    gogocdn = "gogocdn"
    streamsb = "streamsb"
    mixdrop = "mixdrop"
    mp4upload = "mp4upload"
    upcloud = "upcloud"
    vidcloud = "vidcloud"
    streamtape = "streamtape"
    vizcloud = "vizcloud"
    mycloud = "mycloud"
    filemoon = "filemoon"
    vidstreaming = "vidstreaming"
    builtin = "builtin"
    smashystream = "smashystream"
    streamhub = "streamhub"
    streamwish = "streamwish"
    vidhide = "vidhide"
    vidmoly = "vidmoly"
    voe = "voe"
    megaup = "megaup"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


# ===========================
# Server Validation
# ===========================
def validate_server(server: Optional[str]) -> bool:
    if not server:
        return True

    if not StreamingServer.has_value(server):
        api_logger.debug(f"Invalid server: {server}")
        return False

    return True
