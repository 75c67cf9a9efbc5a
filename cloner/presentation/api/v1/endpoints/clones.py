"""Clone endpoints — duplicate a stored entity with its files and relations."""

from fastapi import APIRouter, Depends, HTTPException, status

from cloner.application.schemas import CloneRequest, CloneResponse
from cloner.application.services import CloneService
from cloner.domain.exceptions import (
    EntityNotFoundError,
    FileError,
    StoreError,
    UnknownDestinationError,
    UnsupportedEntityError,
)
from cloner.infrastructure.dependencies import get_clone_service

router = APIRouter(prefix="/clones", tags=["Clones"])


@router.post(
    "/{entity_type}/{entity_id}",
    response_model=CloneResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_entity(
    entity_type: str,
    entity_id: int,
    data: CloneRequest | None = None,
    service: CloneService = Depends(get_clone_service),
) -> CloneResponse:
    """Clone an entity (by table name and id), optionally into another configured store."""
    destination = data.destination if data else None
    try:
        clone = await service.duplicate(entity_type, entity_id, destination=destination)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except UnsupportedEntityError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except UnknownDestinationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (StoreError, FileError) as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return CloneResponse(
        entity_type=entity_type,
        source_id=entity_id,
        clone_id=getattr(clone, clone.primary_key_name),
        destination=destination,
    )
