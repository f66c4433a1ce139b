from fastapi.templating import Jinja2Templates

from .auth import user_store
from .config import settings
from .images import ImageStore
from .progress import ProgressStore
from .seeding import SeedLibrary
from .selector import PairSelector

templates = Jinja2Templates(directory=settings.TEMPLATE_DIR)
progress_store = ProgressStore()
image_store = ImageStore(progress_store)
pair_selector = PairSelector(image_store, progress_store)
seed_library = SeedLibrary(image_store)

__all__ = [
    "templates",
    "progress_store",
    "image_store",
    "pair_selector",
    "seed_library",
    "user_store",
]
