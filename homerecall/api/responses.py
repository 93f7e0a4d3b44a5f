"""Response builders shared by the endpoint modules."""
from typing import Iterable, List, Type, TypeVar
from urllib.parse import quote

from fastapi.responses import Response
from pydantic import BaseModel

from homerecall.services.export import ExportArtifact
from homerecall.services.storage.object_store import ObjectStoreGateway

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def attachment_headers(filename: str) -> dict:
    """Content-Disposition for a download, with an ASCII fallback name."""
    fallback = filename.encode('ascii', 'ignore').decode().replace('"', '') or 'download'
    return {
        'Content-Disposition': f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
    }


def artifact_response(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers=attachment_headers(artifact.filename),
    )


def signed_photo_responses(
    photos: Iterable,
    gateway: ObjectStoreGateway,
    schema: Type[SchemaType]
) -> List[SchemaType]:
    """
    Build photo responses with signed URLs minted in one batch.

    Orphaned photos are never rendered and are left out. A photo whose URL
    could not be minted is returned without one.
    """
    photos = [p for p in photos if not p.is_orphaned]
    urls = gateway.get_signed_urls([p.storage_path for p in photos])
    return [
        schema.model_validate(photo).model_copy(update={'url': urls.get(photo.storage_path)})
        for photo in photos
    ]
