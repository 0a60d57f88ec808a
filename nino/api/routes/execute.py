"""Endpoints running the external tools: pimo, lino and shell scripts."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from nino.api.deps import get_settings, get_store
from nino.config import NinoSettings
from nino.exceptions import InvalidRequestError
from nino.state import ProjectStore
from nino.tools import lino_pull, run_pimo, run_script
from nino.workspace import descriptor_table, folder_directory

router = APIRouter(prefix="/exec", tags=["exec"])


class PimoExecRequest(BaseModel):
    mask: str = Field(alias="yaml")
    data: str = Field(alias="json")


@router.post("/pimo")
def exec_pimo(payload: PimoExecRequest, settings: NinoSettings = Depends(get_settings)) -> Response:
    """Mask `json` with the mask document `yaml`."""
    output = run_pimo(payload.mask, payload.data, settings)
    return Response(content=output, media_type="application/json")


async def _exec_script(request: Request, settings: NinoSettings) -> PlainTextResponse:
    script = (await request.body()).decode("utf-8")
    if not script.strip():
        raise InvalidRequestError("No script provided to execute")
    result = await run_in_threadpool(run_script, script, settings)
    return PlainTextResponse(
        f"$ {script}\n{result.text}",
        headers={"X-Exit-Code": str(result.returncode)},
    )


@router.post("/playbook/{folder}/{filename}")
async def exec_playbook(
    folder: str, filename: str, request: Request, settings: NinoSettings = Depends(get_settings)
) -> PlainTextResponse:
    return await _exec_script(request, settings)


@router.post("/pull/{folder}/{filename}")
async def exec_pull(
    folder: str, filename: str, request: Request, settings: NinoSettings = Depends(get_settings)
) -> PlainTextResponse:
    return await _exec_script(request, settings)


@router.get("/lino/fetch/{folder}/{filename}", response_class=PlainTextResponse)
def fetch_lino_example(
    folder: str,
    filename: str,
    store: ProjectStore = Depends(get_store),
    settings: NinoSettings = Depends(get_settings),
) -> str:
    """First row of the table a descriptor file masks, pulled from its source connector."""
    table = descriptor_table(filename)
    if table is None:
        raise InvalidRequestError(f"File is not a masking file: {filename}")
    output = lino_pull(table, folder_directory(store.input_paths, folder), settings)
    return output.decode("utf-8", errors="replace")
