"""Fixtures for executing generated client modules.

Generated modules are written to ``tmp_path`` together with a types module
matching the schema names of the shared DSH document, then imported under
fresh module names. The fake client records every typed call instead of
talking to a server.
"""

from __future__ import annotations

import importlib
import io
import sys
import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from dsh_api_build.models import GeneratorConfig

TYPES_MODULE = "dsh_test_types"

TYPES_SOURCE = textwrap.dedent(
    '''\
    import enum
    import re
    from typing import Optional

    from pydantic import BaseModel


    class Application(BaseModel):
        image: str


    class Bucket(BaseModel):
        encrypted: bool
        versioned: bool


    class BucketStatus(BaseModel):
        provisioned: bool


    class LimitValue(BaseModel):
        name: str
        value: str


    class Task(BaseModel):
        state: str


    class Volume(BaseModel):
        size_gi_b: int


    class GetTaskKind(str, enum.Enum):
        STREAM = "stream"
        BATCH = "batch"


    class GetVolumeByIdId(str):
        def __new__(cls, value: str) -> "GetVolumeByIdId":
            if not re.fullmatch("[a-z]+", value):
                raise ValueError(f"invalid volume id {value!r}")
            return super().__new__(cls, value)
    '''
)


class FakeGeneratedClient:
    """Stands in for the typed client: records calls, returns canned results."""

    def __init__(self, results: dict[str, Any]) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.results = results

    def __getattr__(self, name: str) -> Callable[..., Any]:
        async def call(*args: Any) -> Any:
            self.calls.append((name, args))
            return self.results.get(name)

        return call


def _make_client(base: type, results: dict[str, Any] | None = None) -> Any:
    class FakeClient(base):  # type: ignore[misc, valid-type]
        tenant_name = "greenbox"

        def __init__(self) -> None:
            self.generated_client = FakeGeneratedClient(results or {})
            self.processed: list[str] = []

        async def token(self) -> str:
            return "Bearer token"

        async def process(self, coro: Any) -> tuple[int, Any]:
            self.processed.append("process")
            return 200, await coro

        async def process_string(self, coro: Any) -> tuple[int, Any]:
            self.processed.append("process_string")
            return 200, await coro

    return FakeClient()


@pytest.fixture
def generated_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A directory on ``sys.path`` that holds the test types module."""
    (tmp_path / f"{TYPES_MODULE}.py").write_text(TYPES_SOURCE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, TYPES_MODULE, raising=False)
    importlib.invalidate_caches()
    return tmp_path


@pytest.fixture
def types_config() -> GeneratorConfig:
    """Generator settings pointing at the test types module."""
    return GeneratorConfig(types_module=TYPES_MODULE)


@pytest.fixture
def load_generated(generated_dir: Path, monkeypatch: pytest.MonkeyPatch):  # noqa: ANN201
    """Return a loader that writes generated source and imports it."""

    def load(name: str, source: str) -> Any:
        (generated_dir / f"{name}.py").write_text(source, encoding="utf-8")
        monkeypatch.delitem(sys.modules, name, raising=False)
        importlib.invalidate_caches()
        return importlib.import_module(name)

    return load


def _render(generate: Callable[..., None], document: dict[str, Any], config: GeneratorConfig) -> str:
    buffer = io.StringIO()
    generate(buffer, document, config)
    return buffer.getvalue()


@pytest.fixture
def make_client():  # noqa: ANN201
    """Return a factory wrapping a generated mixin in a fake host client."""
    return _make_client


@pytest.fixture
def render_module():  # noqa: ANN201
    """Return a helper that renders a module with a generate function."""
    return _render


@pytest.fixture
def schema_types(generated_dir: Path):  # noqa: ANN201
    """The imported test types module, shared with the generated modules."""
    return importlib.import_module(TYPES_MODULE)
