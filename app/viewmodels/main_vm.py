"""ViewModel owning the tree, navigation focus, selection and clipboard."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from core.errors import InvalidName, NotFound, ScopeMismatch
from core.identity import IdGenerator
from core.models import ClipboardSnapshot, Level, Photo, Scope, Tree
from core.services import tree_store
from core.services.clipboard_service import COPY_SUFFIX, ClipboardService
from core.services.interfaces import (
    DeletePlan,
    FocusInvalidated,
    ITreeRepository,
    RenameRequest,
)
from core.services.mutation_service import MutationService
from core.services.selection_service import SelectionState

RENAME_TITLES = {
    Level.GROUP: "Rename Group",
    Level.PERSON: "Rename Person",
    Level.PHOTO: "Rename Photo",
}


class MainVM:
    """Main application view-model.

    Holds the single mutable reference to the current `Tree` snapshot and
    threads it through the pure services. The open scope doubles as the
    navigation focus: root shows groups, a group scope shows its persons and
    a person scope shows its photos. Every changed tree is handed to the
    repository right away.
    """

    def __init__(
        self,
        repo: ITreeRepository,
        mutations: MutationService | None = None,
        clipboard_service: ClipboardService | None = None,
        ids: IdGenerator | None = None,
        copy_suffix: str = COPY_SUFFIX,
    ) -> None:
        """Create a MainVM.

        Args:
            repo: Repository with `load()` and `save(tree)` methods.
            mutations: Add/rename/delete service (defaults to `MutationService`).
            clipboard_service: Cut/copy/paste service (defaults to `ClipboardService`).
            ids: Id generator shared by the default services (one per VM when
                omitted).
            copy_suffix: Name suffix for pasted copies when building the
                default clipboard service.
        """
        self._repo = repo
        self._ids = ids or IdGenerator()
        self._mutations = mutations or MutationService(id_factory=self._ids)
        self._clipboard_service = clipboard_service or ClipboardService(
            id_factory=self._ids, copy_suffix=copy_suffix
        )
        self.tree = Tree()
        self.scope = Scope.root()
        self.selection = SelectionState.idle()
        self.clipboard: ClipboardSnapshot | None = None
        self.rename_request: RenameRequest | None = None
        self.viewing_photo: Photo | None = None
        self._listeners: list[Callable[[MainVM], None]] = []

    # --- lifecycle ---

    def load(self) -> None:
        """Load the stored tree and reset navigation and selection."""
        self.tree = self._repo.load()
        if isinstance(self._ids, IdGenerator):
            self._ids.reserve(tree_store.iter_ids(self.tree))
        self.scope = Scope.root()
        self.selection = SelectionState.idle()
        self._notify()

    def subscribe(self, callback: Callable[[MainVM], None]) -> None:
        """Register `callback`, called with this VM after every state change."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self)

    def _commit_tree(self, tree: Tree) -> None:
        if tree is self.tree:
            return
        self.tree = tree
        try:
            self._repo.save(tree)
        except (OSError, ValueError, TypeError) as ex:
            logger.error("Save tree failed: {}", ex)

    # --- navigation ---

    @property
    def current_level(self) -> Level:
        """Level of the list currently on screen."""
        return self.scope.level

    def current_items(self) -> tuple:
        try:
            return tree_store.collection(self.tree, self.scope)
        except NotFound:
            return ()

    def open_group(self, group_id: str) -> bool:
        try:
            tree_store.find_group(self.tree, group_id)
        except NotFound as ex:
            logger.warning("Open group ignored: {}", ex)
            return False
        self._navigate(Scope.group(group_id))
        return True

    def open_person(self, person_id: str) -> bool:
        if self.scope.level is not Level.PERSON:
            logger.warning("Open person ignored outside a group: {}", person_id)
            return False
        try:
            tree_store.find_person(self.tree, self.scope.group_id, person_id)
        except NotFound as ex:
            logger.warning("Open person ignored: {}", ex)
            return False
        self._navigate(Scope.person(self.scope.group_id, person_id))
        return True

    def back(self) -> None:
        """Navigate one level up (no-op on the group list)."""
        self._navigate(self.scope.parent())

    def _navigate(self, scope: Scope) -> None:
        self.scope = scope
        self.selection = self.selection.cancel()
        self.viewing_photo = None
        self._notify()

    def view_photo(self, photo_id: str) -> Photo | None:
        if self.scope.level is not Level.PHOTO:
            return None
        try:
            photo = tree_store.find_in_scope(self.tree, self.scope, photo_id)
        except NotFound as ex:
            logger.warning("View photo ignored: {}", ex)
            return None
        self.viewing_photo = photo
        self._notify()
        return photo

    def close_photo(self) -> None:
        self.viewing_photo = None
        self._notify()

    # --- gestures / selection ---

    def long_press(self, item_id: str) -> None:
        """Start selecting at the level on screen with `item_id` selected."""
        self.selection = self.selection.long_press(item_id, self.current_level)
        self._notify()

    def toggle(self, item_id: str) -> None:
        self.selection = self.selection.toggle(item_id)
        self._notify()

    def tap(self, item_id: str) -> None:
        """Toggle `item_id` while selecting, otherwise open or view it."""
        if self.selection.active:
            self.toggle(item_id)
            return
        level = self.current_level
        if level is Level.GROUP:
            self.open_group(item_id)
        elif level is Level.PERSON:
            self.open_person(item_id)
        else:
            self.view_photo(item_id)

    def cancel(self) -> None:
        self.selection = self.selection.cancel()
        self._notify()

    @property
    def can_rename(self) -> bool:
        return self.selection.count == 1

    @property
    def can_paste(self) -> bool:
        """Paste is offered only when the clipboard matches the level on screen."""
        return self.clipboard is not None and self.clipboard.level is self.current_level

    def _prune_selection(self) -> None:
        if not self.selection.active:
            return
        present = {it.id for it in self.current_items()}
        state = self.selection
        for item_id in state.selected_ids - present:
            state = state.toggle(item_id)
        self.selection = state

    # --- clipboard ---

    def cut(self) -> None:
        self._capture(self._clipboard_service.cut)

    def copy(self) -> None:
        self._capture(self._clipboard_service.copy)

    def _capture(self, action) -> None:
        if not self.selection.active:
            return
        self.clipboard = action(
            self.tree, self.scope, self.selection.level, self.selection.selected_ids
        )
        self.selection = self.selection.commit()
        self._notify()

    def paste(self) -> bool:
        """Paste the clipboard into the open scope; returns True when applied."""
        if self.clipboard is None:
            return False
        if not self.can_paste:
            logger.warning(
                "Paste refused: clipboard holds {} items, screen shows {}",
                self.clipboard.level.value,
                self.current_level.value,
            )
            return False
        try:
            tree = self._clipboard_service.paste(self.tree, self.scope, self.clipboard)
        except (NotFound, ScopeMismatch) as ex:
            logger.warning("Paste ignored: {}", ex)
            return False
        self._commit_tree(tree)
        self._prune_selection()
        self._notify()
        return True

    def discard_clipboard(self) -> None:
        self.clipboard = None
        self._notify()

    # --- rename ---

    def begin_rename(self) -> RenameRequest | None:
        """Open a rename request for the single selected item."""
        if not self.can_rename:
            return None
        (item_id,) = self.selection.selected_ids
        try:
            item = tree_store.find_in_scope(self.tree, self.scope, item_id)
        except NotFound as ex:
            logger.warning("Rename ignored: {}", ex)
            self.cancel()
            return None
        self.rename_request = RenameRequest(
            item_id=item_id,
            current_name=item.name,
            title=RENAME_TITLES[self.current_level],
        )
        self._notify()
        return self.rename_request

    def confirm_rename(self, new_name: str) -> bool:
        """Apply the pending rename.

        Returns False when the name is rejected; the request stays open and
        the selection is kept. Returns True once the request is closed.
        """
        request = self.rename_request
        if request is None:
            return True
        try:
            tree = self._mutations.rename(self.tree, self.scope, request.item_id, new_name)
        except InvalidName as ex:
            logger.info("Rename rejected: {}", ex)
            return False
        except NotFound as ex:
            logger.warning("Rename ignored: {}", ex)
            tree = self.tree
        else:
            logger.info(
                "Renamed {} {} -> {!r}", self.current_level.value, request.item_id, new_name
            )
        self._commit_tree(tree)
        self.rename_request = None
        self.selection = self.selection.commit()
        self._notify()
        return True

    def cancel_rename(self) -> None:
        self.rename_request = None
        self._notify()

    # --- delete ---

    def plan_delete(self) -> DeletePlan | None:
        """Build the confirmation prompt for deleting the current selection."""
        if not self.selection.active:
            return None
        ids = self.selection.ordered_ids(self.current_items())
        missing = sorted(self.selection.selected_ids - set(ids))
        return self._mutations.plan_delete(self.tree, self.scope, [*ids, *missing])

    def execute_delete(self, plan: DeletePlan) -> FocusInvalidated | None:
        """Delete the planned ids; navigates up when the open item was removed."""
        try:
            result = self._mutations.delete_many(self.tree, plan.scope, plan.ids, focus=self.scope)
        except NotFound as ex:
            logger.warning("Delete ignored: {}", ex)
            self.selection = self.selection.commit()
            self._notify()
            return None

        logger.info(
            "Deleted {} of {} {} item(s)",
            len(result.removed_ids),
            len(plan.ids),
            plan.level.value,
        )
        self._commit_tree(result.tree)
        self.selection = self.selection.commit()
        focus = result.focus_invalidated
        if focus is not None:
            self.scope = Scope.root() if focus.level is Level.GROUP else self.scope.parent()
            self.viewing_photo = None
        self._notify()
        return focus

    # --- adds ---

    def add_group(self, name: str) -> bool:
        return self._add(lambda tree: self._mutations.add_group(tree, name), "group", name)

    def add_person(self, name: str) -> bool:
        if self.scope.level is not Level.PERSON:
            logger.warning("Add person ignored: no group open")
            return False
        group_id = self.scope.group_id
        return self._add(
            lambda tree: self._mutations.add_person(tree, group_id, name), "person", name
        )

    def add_photo(self, name: str, content: str | bytes) -> bool:
        """Store a photo handed over by the capture/editor collaborator."""
        if self.scope.level is not Level.PHOTO:
            logger.warning("Add photo ignored: no person open")
            return False
        group_id, person_id = self.scope.group_id, self.scope.person_id
        return self._add(
            lambda tree: self._mutations.add_photo(tree, group_id, person_id, name, content),
            "photo",
            name,
        )

    def _add(self, action: Callable[[Tree], Tree], kind: str, name: str) -> bool:
        try:
            tree = action(self.tree)
        except InvalidName as ex:
            logger.info("Add {} rejected: {}", kind, ex)
            return False
        except NotFound as ex:
            logger.warning("Add {} ignored: {}", kind, ex)
            return False
        logger.info("Added {} {!r}", kind, name.strip())
        self._commit_tree(tree)
        self._notify()
        return True
