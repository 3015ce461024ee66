"""
API routes for the static parts of the UDF protocol: configuration, server
time and synthetic marks.
"""

import time
from typing import List

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from ...core.config import config
from ...schemas.quotes import MarksResponse, TimescaleMark
from ...schemas.symbols import DatafeedConfigResponse, ExchangeDescriptor, SymbolTypeDescriptor
from ...services.marks import build_marks, build_timescale_marks

router = APIRouter(tags=["UDF"])


@router.get("/config", response_model=DatafeedConfigResponse)
async def get_datafeed_config() -> DatafeedConfigResponse:
    """Capabilities advertised to the charting library."""
    return DatafeedConfigResponse(
        exchanges=[ExchangeDescriptor(value="", name="All Exchanges", desc="")],
        symbols_types=[
            SymbolTypeDescriptor(name="All types", value=""),
            SymbolTypeDescriptor(name="Forex", value="forex"),
        ],
        supported_resolutions=config.supported_resolutions_list,
    )


@router.get("/time", response_class=PlainTextResponse)
async def get_server_time() -> str:
    return str(int(time.time()))


@router.get("/marks", response_model=MarksResponse)
async def get_marks():
    return build_marks()


@router.get("/timescale_marks", response_model=List[TimescaleMark])
async def get_timescale_marks():
    return build_timescale_marks()
