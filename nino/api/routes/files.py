"""Workspace listing, file read/write and boilerplate creation.

Every endpoint that writes to the workspace reloads the project afterwards.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from nino.api.deps import get_store
from nino.state import ProjectStore
from nino.workspace import (
    create_folder,
    create_from_template,
    create_mask_file,
    list_workspace,
    read_file,
    write_file,
)

router = APIRouter(tags=["files"])

YAML_MEDIA_TYPE = "application/yaml"


@router.get("/files")
def list_files(store: ProjectStore = Depends(get_store)) -> Dict[str, Any]:
    return list_workspace(store.input_paths)


@router.get("/file/{path:path}")
def get_file(path: str, store: ProjectStore = Depends(get_store)) -> Response:
    content = read_file(store.input_paths, path)
    media_type = YAML_MEDIA_TYPE if path.endswith((".yaml", ".yml")) else "text/plain"
    return Response(content=content, media_type=media_type)


@router.post("/file/{path:path}", response_class=PlainTextResponse)
async def update_file(path: str, request: Request, store: ProjectStore = Depends(get_store)) -> str:
    body = await request.body()
    await run_in_threadpool(write_file, store.input_paths, path, body)
    await run_in_threadpool(store.reload)
    return f"File {path} updated successfully"


@router.post("/folder/{path:path}", response_class=PlainTextResponse, status_code=status.HTTP_201_CREATED)
def new_folder(path: str, store: ProjectStore = Depends(get_store)) -> str:
    created = create_folder(store.input_paths, path)
    return f"Folder '{created}' created successfully"


@router.post(
    "/new/mask/{folder}/{table}",
    response_class=PlainTextResponse,
    status_code=status.HTTP_201_CREATED,
)
def new_mask(folder: str, table: str, store: ProjectStore = Depends(get_store)) -> str:
    """Descriptor skeleton listing every column of `table`."""
    created = create_mask_file(store.snapshot(), store.input_paths, folder, table)
    store.reload()
    return f"File {created} created successfully"


@router.post("/new/{kind}/{path:path}", response_class=PlainTextResponse, status_code=status.HTTP_201_CREATED)
def new_file(kind: str, path: str, store: ProjectStore = Depends(get_store)) -> str:
    """Boilerplate file of `kind` (mask, playbook, dataconnectors or bash)."""
    created = create_from_template(store.input_paths, kind, path)
    store.reload()
    return f"File '{created}' created successfully"
