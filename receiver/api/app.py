from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from receiver.api.routes import upload
from receiver.core.assets import AssetStore, PackageAssetStore
from receiver.core.config import Settings, settings
from receiver.core.file_storage import TempFileStorage
from receiver.services.upload_acceptor import UploadAcceptor


def create_app(config: Settings = settings, assets: AssetStore | None = None) -> FastAPI:
    """Build the receiver application from settings."""
    app = FastAPI(title=config.app_name)

    package_assets = PackageAssetStore()
    storage = TempFileStorage(config.tmp_dir)

    app.state.settings = config
    app.state.storage = storage
    app.state.assets = assets or package_assets
    app.state.acceptor = UploadAcceptor(
        target_dir=config.data_dir,
        storage=storage,
        chunk_size=config.chunk_size,
    )

    app.include_router(upload.router)
    # The catch-all mount has to come after the routes it would shadow.
    app.mount("/", StaticFiles(directory=package_assets.root, html=True), name="static")
    return app
