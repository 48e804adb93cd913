from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from photo_map.core.config import Settings
from photo_map.core.env import configure_logging, load_dotenv_if_present
from photo_map.core.models import PhotoPayload
from photo_map.ingest import load_clusters_async

app = FastAPI(title="Photo Map API")

load_dotenv_if_present()
configure_logging()

settings = Settings.from_env()
PUBLIC_PREFIX = settings.public_prefix.rstrip("/") or "/photos"


def _thumbnails_prefix() -> str:
    """Public URL of the thumbnail cache, nested under the photo mount when possible."""
    try:
        relative = settings.thumbnails_dir.resolve().relative_to(settings.photos_dir.resolve())
    except ValueError:
        return "/thumbnails"
    return f"{PUBLIC_PREFIX}/{relative.as_posix()}"


THUMBNAILS_PREFIX = _thumbnails_prefix()

if not THUMBNAILS_PREFIX.startswith(f"{PUBLIC_PREFIX}/"):
    app.mount(
        THUMBNAILS_PREFIX,
        StaticFiles(directory=settings.thumbnails_dir, check_dir=False),
        name="thumbnails",
    )
app.mount(
    PUBLIC_PREFIX,
    StaticFiles(directory=settings.photos_dir, check_dir=False),
    name="photos",
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/photos")
async def list_photo_clusters() -> list[list[PhotoPayload]]:
    """Every readable photo, grouped into proximity clusters, anchor first."""
    clusters = await load_clusters_async(settings)
    return [
        [record.to_payload(PUBLIC_PREFIX, thumbnails_prefix=THUMBNAILS_PREFIX) for record in cluster]
        for cluster in clusters
    ]
