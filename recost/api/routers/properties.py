
from fastapi import APIRouter, Depends, HTTPException
from ..deps import get_capture_session, get_current_user
from ...models import NewProperty, Property
from ...services.workflow import CaptureSession

router = APIRouter(prefix="/properties", tags=["properties"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[Property])
async def list_properties(include_archived: bool = True, session: CaptureSession = Depends(get_capture_session)):
    """List properties; archived ones are kept for history lookups unless include_archived=false"""
    properties = await session.refresh_properties()
    if include_archived:
        return properties
    return session.active_properties


@router.post("", response_model=Property, status_code=201)
async def add_property(req: NewProperty, session: CaptureSession = Depends(get_capture_session)):
    """Create a property from its address and make it the selected one"""
    return await session.add_property(req.address)


@router.put("/{property_id}", response_model=Property)
async def save_property(property_id: str, prop: Property, session: CaptureSession = Depends(get_capture_session)):
    if prop.id != property_id:
        raise HTTPException(status_code=422, detail="Property id does not match the URL")
    await session.refresh_properties()
    return await session.save_property(prop)


@router.post("/{property_id}/archive", response_model=Property)
async def toggle_archive(property_id: str, session: CaptureSession = Depends(get_capture_session)):
    await session.refresh_properties()
    return await session.toggle_archive(property_id)
