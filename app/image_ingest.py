"""
Uploaded image → data URL for personalDetails.profilePicture.
"""
import base64
import mimetypes

_DEFAULT_MIME = "application/octet-stream"


def to_data_url(data: bytes, filename: str = "", mime: str | None = None) -> str:
    mime = mime or mimetypes.guess_type(filename)[0] or _DEFAULT_MIME
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
