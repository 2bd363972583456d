"""Share links and file export/import package."""

from src.sharing.codec import (
    DecodedShareLink,
    ShareLinkError,
    build_share_url,
    decode_share,
    decode_token,
    encode_budget,
    parse_share_link,
    split_fragment,
)
from src.sharing.exchange import (
    ImportMode,
    ImportRejectedError,
    export_budget,
    load_import_file,
)

__all__ = [
    # Share links
    "DecodedShareLink",
    "ShareLinkError",
    "build_share_url",
    "decode_share",
    "decode_token",
    "encode_budget",
    "parse_share_link",
    "split_fragment",
    # Files
    "ImportMode",
    "ImportRejectedError",
    "export_budget",
    "load_import_file",
]
