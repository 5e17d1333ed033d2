from fastapi import APIRouter, Depends
from pydantic import BaseModel

from actnames.config import Theme, save_theme
from actnames.server.runtime import Runtime, get_runtime

router = APIRouter(tags=["settings"])


class UpdateSettingsRequest(BaseModel):
    theme: Theme


@router.get("/settings")
async def get_settings(rt: Runtime = Depends(get_runtime)):
    return {"theme": rt.config.theme}


@router.patch("/settings")
async def update_settings(req: UpdateSettingsRequest, rt: Runtime = Depends(get_runtime)):
    save_theme(req.theme)
    rt.config = rt.config.model_copy(update={"theme": req.theme})
    return {"theme": rt.config.theme}
