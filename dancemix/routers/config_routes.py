"""Config routes: read, partial update, reset."""

from fastapi import APIRouter

from dancemix.config import default_config, load_config, save_config
from dancemix.models.config import AppConfig, ConfigUpdate

router = APIRouter(prefix="/api", tags=["config"])


@router.get("/config", response_model=AppConfig)
async def get_config():
    return await load_config()


@router.put("/config", response_model=AppConfig)
async def put_config(body: ConfigUpdate):
    config = await load_config(apply_env=False)
    config.update(body.model_dump(exclude_none=True))
    await save_config(config)
    return await load_config()


@router.post("/config/reset", response_model=AppConfig)
async def reset_config():
    config = default_config()
    await save_config(config)
    return config
