from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from bridal_rentals.api.core.auth import session_user_id
from bridal_rentals.api.dependencies import get_preferences_repo
from bridal_rentals.api.schemas import ColumnPreferencesIn, WidgetPreferencesIn
from bridal_rentals.domain.preferences import UserPreferencesRepository

router = APIRouter(prefix="/user-preferences", tags=["User Preferences"])


@router.get("/widgets", summary="Visible dashboard widgets")
async def get_widget_preferences(
    user_id: str = Depends(session_user_id),
    preferences: UserPreferencesRepository = Depends(get_preferences_repo),
):
    widgets, is_default = preferences.get_widgets(user_id)
    return {"success": True, "widgetPreferences": widgets, "isDefault": is_default}


@router.put("/widgets", summary="Save visible dashboard widgets")
async def update_widget_preferences(
    payload: dict | None = Body(default=None),
    user_id: str = Depends(session_user_id),
    preferences: UserPreferencesRepository = Depends(get_preferences_repo),
):
    widgets = WidgetPreferencesIn.model_validate(payload or {}).widgetVisibility
    if not isinstance(widgets, list) or not all(isinstance(w, str) for w in widgets):
        raise HTTPException(status_code=400, detail="widgetVisibility must be an array")
    preferences.save_widgets(user_id, widgets)
    return {"success": True, "message": "Widget preferences updated successfully"}


@router.get("/columns/{page}", summary="Visible table columns for a page")
async def get_column_preferences(
    page: str,
    user_id: str = Depends(session_user_id),
    preferences: UserPreferencesRepository = Depends(get_preferences_repo),
):
    columns, is_default = preferences.get_columns(user_id, page)
    return {"success": True, "columnPreferences": columns, "isDefault": is_default}


@router.put("/columns/{page}", summary="Save visible table columns for a page")
async def update_column_preferences(
    page: str,
    payload: dict | None = Body(default=None),
    user_id: str = Depends(session_user_id),
    preferences: UserPreferencesRepository = Depends(get_preferences_repo),
):
    try:
        body = ColumnPreferencesIn.model_validate(payload or {})
    except ValidationError:
        raise HTTPException(status_code=400, detail="columnVisibility must map column names to booleans")
    if body.columnVisibility is None:
        raise HTTPException(status_code=400, detail="columnVisibility is required")
    preferences.save_columns(user_id, page, body.columnVisibility)
    return {"success": True, "message": f"Column preferences for {page} updated successfully"}
