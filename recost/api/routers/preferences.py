
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from ..deps import get_app_settings_service, get_current_user, require_admin
from ...models import StorageFolders, User
from ...services.app_settings import AppSettingsService, Theme

router = APIRouter(prefix="/settings", tags=["settings"], dependencies=[Depends(get_current_user)])


class ThemePreference(BaseModel):
    theme: Theme


@router.get("/folders", response_model=StorageFolders)
async def get_folders(service: AppSettingsService = Depends(get_app_settings_service)):
    return service.get_storage_folders()


@router.put("/folders", response_model=StorageFolders)
async def save_folders(
    folders: StorageFolders,
    admin: User = Depends(require_admin),
    service: AppSettingsService = Depends(get_app_settings_service),
):
    """Drive folders for the cost sheet and the scans (administrators only)"""
    return service.save_storage_folders(admin, folders)


@router.get("/theme", response_model=ThemePreference)
async def get_theme(service: AppSettingsService = Depends(get_app_settings_service)):
    return ThemePreference(theme=service.get_theme())


@router.put("/theme", response_model=ThemePreference)
async def set_theme(pref: ThemePreference, service: AppSettingsService = Depends(get_app_settings_service)):
    return ThemePreference(theme=service.set_theme(pref.theme))
