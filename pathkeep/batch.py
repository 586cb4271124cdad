"""Batch helpers: resolve many paths, then fan out filesystem calls concurrently.

Paths are resolved synchronously on the caller's thread, so a boundary or
configuration error surfaces before any I/O is started. The filesystem calls run
in worker threads via ``asyncio.to_thread`` and are gathered in request order.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from pathkeep.resolver import PathResolver

PathRequest = Sequence[str]


class BatchOp(str, Enum):
    """Operations supported by :func:`run_batch`."""

    PATH = "path"
    EXISTS = "exists"
    IS_FILE = "is_file"
    IS_DIR = "is_dir"
    READ = "read"


class BatchRequest(BaseModel):
    """One operation against a configured directory."""

    op: BatchOp = Field(description="Operation to perform")
    dir: str = Field(description="Directory key from the resolver's directory table")
    paths: List[str] = Field(default_factory=list, description="Segments under the directory")
    encoding: Optional[str] = Field(
        default=None, description="Text encoding for 'read'; bytes are returned when omitted"
    )


def resolve_paths(resolver: "PathResolver", requests: Sequence[PathRequest]) -> List[str]:
    """Resolve ``[dir, *segments]`` requests.

    A first element that is not a directory key is treated as a plain segment.
    """
    resolved: List[str] = []
    directories = resolver.directory_map()
    for request in requests:
        if not request:
            resolved.append(resolver.resolve())
            continue
        head, *rest = request
        if head in directories:
            resolved.append(resolver.resolve(directories[head], *rest))
        else:
            resolved.append(resolver.resolve(head, *rest))
    return resolved


async def exists_batch(resolver: "PathResolver", requests: Sequence[PathRequest]) -> List[bool]:
    paths = resolve_paths(resolver, requests)
    calls = (asyncio.to_thread(resolver.files.exists, p) for p in paths)
    return list(await asyncio.gather(*calls))


async def read_batch(
    resolver: "PathResolver",
    requests: Sequence[PathRequest],
    encoding: Optional[str] = None,
) -> List[Union[str, bytes]]:
    paths = resolve_paths(resolver, requests)
    if encoding:
        calls = (asyncio.to_thread(resolver.files.read_text, p, encoding) for p in paths)
    else:
        calls = (asyncio.to_thread(resolver.files.read_bytes, p) for p in paths)
    return list(await asyncio.gather(*calls))


def _operation(resolver: "PathResolver", request: BatchRequest, path: str):
    files = resolver.files
    if request.op is BatchOp.EXISTS:
        return asyncio.to_thread(files.exists, path)
    if request.op is BatchOp.IS_FILE:
        return asyncio.to_thread(files.is_file, path)
    if request.op is BatchOp.IS_DIR:
        return asyncio.to_thread(files.is_dir, path)
    if request.encoding:
        return asyncio.to_thread(files.read_text, path, request.encoding)
    return asyncio.to_thread(files.read_bytes, path)


async def _value(value: Any) -> Any:
    return value


async def run_batch(
    resolver: "PathResolver",
    requests: Sequence[Union[BatchRequest, Mapping[str, Any]]],
) -> List[Any]:
    """Run mixed operations and return their results in request order.

    Raises:
        pydantic.ValidationError: malformed request
        ConfigurationError: unknown directory key
    """
    parsed = [
        r if isinstance(r, BatchRequest) else BatchRequest.model_validate(r) for r in requests
    ]
    paths = [resolver.path_for(request.dir, *request.paths) for request in parsed]
    pending = [
        _value(path) if request.op is BatchOp.PATH else _operation(resolver, request, path)
        for request, path in zip(parsed, paths)
    ]
    return list(await asyncio.gather(*pending))


__all__ = [
    "BatchOp",
    "BatchRequest",
    "resolve_paths",
    "exists_batch",
    "read_batch",
    "run_batch",
]
