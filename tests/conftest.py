from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from receiver.api.app import create_app
from receiver.core.config import Settings
from receiver.core.file_storage import TempFileStorage
from receiver.services.upload_acceptor import UploadAcceptor


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    return tmp_path / "tmp"


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def config(tmp_dir: Path, data_dir: Path) -> Settings:
    return Settings(tmp_dir=tmp_dir, data_dir=data_dir, chunk_size=4)


@pytest.fixture
def storage(tmp_dir: Path) -> TempFileStorage:
    return TempFileStorage(tmp_dir)


@pytest.fixture
def acceptor(data_dir: Path, storage: TempFileStorage) -> UploadAcceptor:
    return UploadAcceptor(target_dir=data_dir, storage=storage, chunk_size=4)


@pytest.fixture
def client(config: Settings) -> TestClient:
    return TestClient(create_app(config))
