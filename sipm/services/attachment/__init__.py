"""Death certificate attachment encoding."""

from sipm.services.attachment.encoder import (
    AttachmentError,
    decode_attachment,
    encode_attachment,
    is_data_url,
)

__all__ = [
    "AttachmentError",
    "decode_attachment",
    "encode_attachment",
    "is_data_url",
]
