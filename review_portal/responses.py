"""Response helpers shared by the file download routes."""

from urllib.parse import quote

from fastapi.responses import Response

from review_portal.services.content_store import FileDescriptor


def inline_file_response(descriptor: FileDescriptor, data: bytes) -> Response:
    """Serve stored content inline so browsers open the PDF in place."""
    return Response(
        content=data,
        media_type=descriptor.content_type or "application/pdf",
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(descriptor.filename)}"},
    )
