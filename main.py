from __future__ import annotations

from pathlib import Path

from loguru import logger

from app.viewmodels.main_vm import MainVM
from core.services import tree_store
from core.services.clipboard_service import COPY_SUFFIX
from infrastructure.json_repository import JsonTreeRepository
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings

BASE_DIR = Path(__file__).parent
DEFAULT_STORE = "~/AppData/Local/PhotoFolders/tree.json"


def build_view_model(settings: JsonSettings) -> MainVM:
    """Create the view-model for the configured store and load it."""
    repo = JsonTreeRepository(settings.resolve_path("storage.path", DEFAULT_STORE))
    vm = MainVM(repo, copy_suffix=str(settings.get("clipboard.copy_suffix", COPY_SUFFIX)))
    vm.load()
    return vm


def main() -> int:
    settings = JsonSettings(BASE_DIR / "settings.json")
    init_logging(settings.get("logging.dir"), level=str(settings.get("logging.level", "INFO")))

    vm = build_view_model(settings)
    logger.info("Ready | groups={} items={}", len(vm.tree.groups), tree_store.count_items(vm.tree))
    for group in vm.tree.groups:
        photos = sum(len(p.photos) for p in group.persons)
        print(f"{group.name}: {len(group.persons)} person(s), {photos} photo(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
