"""Tool listing: the function schemas an agent variant exposes to the model."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from adapters.rest.dependencies import get_factory
from adapters.rest.schemas import ToolOut
from domain.exceptions import ConfigurationError
from factory import ServiceFactory

router = APIRouter(prefix="/api", tags=["tools"])


@router.get("/tools", response_model=list[ToolOut])
async def list_tools(
    variant: Optional[str] = None,
    factory: ServiceFactory = Depends(get_factory),
):
    try:
        registry = factory.build_registry(variant or factory.config.agent_variant)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [ToolOut(**spec.to_function_schema()) for spec in registry.specs()]
